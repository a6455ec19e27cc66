"""
Tunable constants for the canonicalization passes.
"""

# Damping applied to every corrective pass. Ad hoc, kept small so that repeated
# passes creep toward the fixed point instead of overshooting.
STABILITY = 0.1

# Largest per-vertex displacement below which an iteration counts as converged
CONVERGENCE_THRESHOLD = 1e-8

# Magnitude below which a vector may not be used as a divisor
DEGENERATE_EPSILON = 1e-12

# Show a progress bar only for runs at least this long
PROGRESS_BAR_MIN_ITERATIONS = 100
