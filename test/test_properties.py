""" Stress test using hypothesis to generate shaders.

Idea:
- generate a random acyclic call tree with a random number of blocks
- instrument it
- check that every reachable block got exactly one counter
"""

import hypothesis
from hypothesis import strategies as st

from spvtrace.irutils import verify_module
from spvtrace.opt import BasicBlockTracePass
from spvtrace.spirv import Op
from util import call_tree_shader


@st.composite
def call_trees(draw):
    """ Draw the arguments of call_tree_shader.

    Functions only call functions with a higher index, so there are no
    cycles.
    """
    count = draw(st.integers(min_value=1, max_value=6))
    block_counts = draw(st.lists(
        st.integers(min_value=1, max_value=4), min_size=count,
        max_size=count))
    calls = []
    for index in range(count):
        if index + 1 < count:
            callees = st.integers(min_value=index + 1, max_value=count - 1)
            calls.append(draw(st.lists(callees, max_size=3)))
        else:
            calls.append([])
    entry_points = draw(st.lists(
        st.integers(min_value=0, max_value=count - 1), unique=True))
    variables = draw(st.lists(
        st.integers(min_value=0, max_value=2), min_size=count,
        max_size=count))
    return block_counts, calls, entry_points, variables


def reachable(calls, entry_points):
    seen = set()
    worklist = list(entry_points)
    while worklist:
        index = worklist.pop()
        if index not in seen:
            seen.add(index)
            worklist.extend(calls[index])
    return seen


@hypothesis.given(call_trees(), st.booleans(), st.booleans())
@hypothesis.settings(max_examples=200, deadline=None)
def test_labels(tree, wide_counters, atomic):
    block_counts, calls, entry_points, variables = tree
    shader = call_tree_shader(block_counts, calls, entry_points, variables)
    trace_pass = BasicBlockTracePass(
        wide_counters=wide_counters, atomic=atomic)
    trace_pass.run(shader.module)
    verify_module(shader.module)

    label_map = dict(trace_pass.label_map)
    expected = {
        block.id
        for index in reachable(calls, entry_points)
        for block in shader.blocks[index]}

    # Trace indices are a bijection onto 0..n-1:
    assert set(label_map) == expected
    assert sorted(label_map.values()) == list(range(len(expected)))

    # Each reachable block increments its own counter once:
    for blocks in shader.blocks:
        for block in blocks:
            access_chains = [
                i for i in block if i.opcode == Op.OpAccessChain]
            if block.id in expected:
                assert len(access_chains) == 1
                position = block.first_non_variable_position()
                assert block[position] is access_chains[0]
            else:
                assert access_chains == []


@hypothesis.given(call_trees())
@hypothesis.settings(max_examples=50, deadline=None)
def test_deterministic(tree):
    block_counts, calls, entry_points, variables = tree
    maps = []
    for _ in range(2):
        shader = call_tree_shader(
            block_counts, calls, entry_points, variables)
        trace_pass = BasicBlockTracePass()
        trace_pass.run(shader.module)
        maps.append(dict(trace_pass.label_map))
    assert maps[0] == maps[1]
