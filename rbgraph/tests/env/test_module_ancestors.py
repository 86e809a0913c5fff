# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from collections import Counter

from rbgraph.env.global_env import InMemoryGlobalEnv
from rbgraph.env.kinds import Receiver, StaticEvalKind
from rbgraph.env.module_entity import ModuleEntity
from rbgraph.test_support import FakeDependent, FakeStaticRef, class_node, include_node, module_node


def _define(genv: InMemoryGlobalEnv, path: str, node) -> ModuleEntity:
	mod = genv.resolve_cpath(tuple(path.split("::")))
	mod.add_module_def(genv, node)
	return mod


def _settle(genv: InMemoryGlobalEnv) -> list:
	return genv.run_static_evals()


def test_superclass_defaults_to_object(genv: InMemoryGlobalEnv):
	c = _define(genv, "C", class_node())
	_settle(genv)

	assert c.superclass is genv.mod_object
	assert c in genv.mod_object.child_modules


def test_explicit_superclass_links_both_ways(genv: InMemoryGlobalEnv):
	c = _define(genv, "C", class_node("B"))
	_settle(genv)
	b = genv.resolve_cpath(("B",))

	assert c.superclass is b
	assert b.child_modules == [c]
	assert c not in genv.mod_object.child_modules


def test_decls_take_priority_over_defs(genv: InMemoryGlobalEnv):
	c = _define(genv, "C", class_node("A"))
	c.add_module_decl(genv, class_node("B"))
	_settle(genv)

	assert c.superclass.cpath == ("B",)


def test_first_explicit_superclass_wins(genv: InMemoryGlobalEnv):
	c = genv.resolve_cpath(("C",))
	c.add_module_decl(genv, class_node())
	c.add_module_decl(genv, class_node("A"))
	c.add_module_decl(genv, class_node("B"))
	_settle(genv)

	assert c.superclass.cpath == ("A",)


def test_module_like_node_forces_no_superclass(genv: InMemoryGlobalEnv):
	m = _define(genv, "M", module_node())
	_settle(genv)
	assert m.superclass is None

	c = genv.resolve_cpath(("C",))
	c.add_module_decl(genv, module_node())
	c.add_module_decl(genv, class_node("A"))
	_settle(genv)
	assert c.superclass is None


def test_unresolved_superclass_reference(genv: InMemoryGlobalEnv):
	# explicit reference without a lookup result falls back to Object
	c = _define(genv, "C", class_node(unresolved=True))
	# a lookup that resolved to something that is not a module leaves no superclass
	d = _define(genv, "D", class_node())
	d.module_defs.first().has_superclass = True
	d.module_defs.first().superclass = FakeStaticRef(None)
	_settle(genv)

	assert c.superclass is genv.mod_object
	assert d.superclass is None


def test_superclass_change_moves_back_reference(genv: InMemoryGlobalEnv):
	node = class_node("A")
	c = _define(genv, "C", node)
	_settle(genv)
	a = genv.resolve_cpath(("A",))
	assert a.child_modules == [c]

	node.superclass = FakeStaticRef(("B",))
	c.on_parent_modules_changed(genv)

	assert c.superclass.cpath == ("B",)
	assert a.child_modules == []
	assert genv.resolve_cpath(("B",)).child_modules == [c]


def test_basic_object_has_no_superclass(genv: InMemoryGlobalEnv):
	bo = _define(genv, "BasicObject", class_node())
	_settle(genv)

	assert bo.superclass is None


def test_include_links_and_unlinks(genv: InMemoryGlobalEnv):
	c = _define(genv, "C", class_node())
	idef = include_node("M")
	idecl = include_node("N")
	c.add_include_def(genv, idef)
	c.add_include_decl(genv, idecl)
	_settle(genv)
	m, n = genv.resolve_cpath(("M",)), genv.resolve_cpath(("N",))

	assert c.included_modules == {idef: m, idecl: n}
	assert m.child_modules == [c]
	assert n.child_modules == [c]

	c.remove_include_def(genv, idef)
	_settle(genv)
	assert c.included_modules == {idecl: n}
	assert m.child_modules == []


def test_include_without_target_adds_no_link(genv: InMemoryGlobalEnv):
	c = _define(genv, "C", class_node())
	c.add_include_def(genv, include_node(None))
	_settle(genv)

	assert c.included_modules == {}


def test_include_retarget(genv: InMemoryGlobalEnv):
	c = _define(genv, "C", class_node())
	idef = include_node("M")
	c.add_include_def(genv, idef)
	_settle(genv)

	idef.target = FakeStaticRef(("N",))
	c.on_parent_modules_changed(genv)
	assert c.included_modules[idef].cpath == ("N",)
	assert genv.resolve_cpath(("M",)).child_modules == []

	idef.target = None
	c.on_parent_modules_changed(genv)
	assert c.included_modules == {}
	assert genv.resolve_cpath(("N",)).child_modules == []


def test_back_reference_survives_while_any_link_remains(genv: InMemoryGlobalEnv):
	c = _define(genv, "C", class_node("P"))
	first, second = include_node("P"), include_node("P")
	c.add_include_def(genv, first)
	c.add_include_def(genv, second)
	_settle(genv)
	p = genv.resolve_cpath(("P",))
	assert p.child_modules == [c]

	c.remove_include_def(genv, first)
	c.remove_include_def(genv, second)
	_settle(genv)
	assert p.child_modules == [c]

	c.module_defs.first().superclass = FakeStaticRef(("Q",))
	c.on_parent_modules_changed(genv)
	assert p.child_modules == []


def test_parent_recomputation_is_idempotent(genv: InMemoryGlobalEnv):
	c = _define(genv, "C", class_node("B"))
	c.add_include_def(genv, include_node("M"))
	c.get_method(Receiver.INSTANCE, "foo").callsites.add(FakeDependent("call"))
	_settle(genv)
	genv.take_runs()
	state = (c.superclass_id, dict(c.included_module_ids))

	c.on_parent_modules_changed(genv)

	assert (c.superclass_id, dict(c.included_module_ids)) == state
	assert list(genv.static_eval_queue) == []
	assert genv.take_runs() == []


def test_ancestor_change_requeues_dependents(genv: InMemoryGlobalEnv):
	c = _define(genv, "C", class_node())
	_settle(genv)
	inst_call, sing_call = FakeDependent("inst"), FakeDependent("sing")
	ivar_read, static_read = FakeDependent("@x"), FakeDependent("K")
	c.get_method(Receiver.INSTANCE, "foo").callsites.add(inst_call)
	c.get_method(Receiver.SINGLETON, "new").callsites.add(sing_call)
	c.add_ivar_read(ivar_read)
	c.add_static_read("K", static_read)

	c.add_module_decl(genv, class_node("B"))
	reads = _settle(genv)

	assert reads == [static_read]
	assert set(genv.take_runs()) == {inst_call, sing_call, ivar_read}


def _diamond(genv: InMemoryGlobalEnv) -> dict:
	# K <- L, K <- M, L <- N, M <- N (all through includes)
	mods = {name: _define(genv, name, module_node()) for name in ("K", "L", "M", "N")}
	for child, parent in (("L", "K"), ("M", "K"), ("N", "L"), ("N", "M")):
		mods[child].add_include_def(genv, include_node(parent))
	_settle(genv)
	return mods


def test_cascade_reaches_each_descendant_once(genv: InMemoryGlobalEnv):
	mods = _diamond(genv)
	reads = {name: FakeDependent(name) for name in mods}
	for name, mod in mods.items():
		mod.add_static_read("X", reads[name])

	mods["K"].on_ancestors_updated(genv, None)

	queued = Counter(payload for kind, payload in genv.static_eval_queue if kind is StaticEvalKind.STATIC_READ_CHANGED)
	assert queued == Counter(reads.values())


def test_cascade_stops_on_self_referential_cycle(genv: InMemoryGlobalEnv):
	a = _define(genv, "A", class_node("A"))
	_settle(genv)
	assert a.superclass is a
	assert a.child_modules == [a]

	read = FakeDependent("X")
	a.add_static_read("X", read)
	a.on_ancestors_updated(genv, None)

	assert list(genv.static_eval_queue) == [(StaticEvalKind.STATIC_READ_CHANGED, read)]


def test_cascade_on_two_module_cycle_terminates(genv: InMemoryGlobalEnv):
	a = _define(genv, "A", class_node("B"))
	b = _define(genv, "B", class_node("A"))
	_settle(genv)

	assert a.superclass is b
	assert b.superclass is a
	assert sorted(m.show_cpath() for m in a.each_descendant()) == ["A", "B"]

	a.add_static_read("X", FakeDependent("a"))
	b.add_static_read("X", FakeDependent("b"))
	genv.static_eval_queue.clear()
	a.on_ancestors_updated(genv, None)
	assert len(genv.static_eval_queue) == 2


def test_cascade_with_base_mod_equal_to_self_does_nothing(genv: InMemoryGlobalEnv):
	a = _define(genv, "A", class_node())
	_settle(genv)
	a.add_static_read("X", FakeDependent("a"))

	a.on_ancestors_updated(genv, a)

	assert list(genv.static_eval_queue) == []


def test_each_descendant(genv: InMemoryGlobalEnv):
	a = _define(genv, "A", class_node())
	b = _define(genv, "B", class_node("A"))
	c = _define(genv, "C", class_node("B"))
	d = _define(genv, "D", class_node("A"))
	_settle(genv)

	found = list(a.each_descendant())
	assert found[0] is a
	assert Counter(found) == Counter([a, b, c, d])
	assert list(c.each_descendant()) == [c]
	assert list(b.each_descendant(b)) == []


def test_inner_module_change_reaches_subclasses(genv: InMemoryGlobalEnv):
	a = _define(genv, "A", class_node())
	b = _define(genv, "B", class_node("A"))
	_settle(genv)
	read_a, read_b, read_other = FakeDependent("A.X"), FakeDependent("B.X"), FakeDependent("A.Y")
	a.add_static_read("X", read_a)
	b.add_static_read("X", read_b)
	a.add_static_read("Y", read_other)

	_define(genv, "A::X", module_node())
	reads = _settle(genv)

	assert set(reads) == {read_a, read_b}

	b.remove_static_read("X", read_b)
	a.on_inner_modules_changed(genv, "X")
	assert _settle(genv) == [read_a]


def test_get_vertexes_collects_nested_constants(genv: InMemoryGlobalEnv):
	a = _define(genv, "A", class_node())
	inner = _define(genv, "A::B", module_node())
	k = a.get_const("K")
	l_const = inner.get_const("L")

	vtxs = genv.mod_object.get_vertexes([])

	assert k.vtx in vtxs
	assert l_const.vtx in vtxs
	assert genv.mod_object.get_const("A").vtx in vtxs
	assert a.get_const("B").vtx in vtxs
	assert len(vtxs) == len(set(map(id, vtxs)))
