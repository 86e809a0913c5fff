# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
import pytest

from rbgraph.env.global_env import InMemoryGlobalEnv


@pytest.fixture
def genv() -> InMemoryGlobalEnv:
	"""Fresh environment with only the root module allocated."""
	return InMemoryGlobalEnv()
