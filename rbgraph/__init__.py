# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
rbgraph: incremental entity/type graph for a Ruby-style type-inference engine.

Subpackages:
  core: type lattice values, inference-graph vertices, config, type reader
  env:  module/method/constant/ivar entities and the scheduler-facing env
"""

__all__ = ["core", "env"]
