"""
Constants for circle score computation.

The score formula is a policy, not a physical derivation:

    circle_score = SCORE_BASELINE - average_deviation * DEVIATION_PENALTY

Both values are tunable. Changing them changes every reported score, so keep
them fixed when results must stay comparable across runs.
"""

# Score of a shape whose four diameters are identical
SCORE_BASELINE = 100.0

# Points deducted per pixel of average diameter deviation
DEVIATION_PENALTY = 0.6

# Number of diameters measured per scan
DIAMETER_COUNT = 4
