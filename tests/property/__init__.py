"""Property-based tests for querysim.

Property-based testing validates invariants that must hold for ALL inputs,
not just the specific examples we think of. Generation must be sound and
replayable for every seed, so these are the tests that matter most.

Test categories:
- contracts/: Predicate evaluation and serialization invariants
- generation/: Budget, dispatch, generator soundness and determinism
"""
