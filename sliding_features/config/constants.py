"""
Library-wide default parameters for views.

Views constructed directly use these values. The factory reads the
environment-backed overrides from Config, which fall back to these.
"""

# ==================== Moving averages ====================

DEFAULT_ALMA_SIGMA = 6.0
DEFAULT_ALMA_OFFSET = 0.85

# Ema smoothing weight is alpha / (1 + window_len)
DEFAULT_EMA_ALPHA = 2.0


# ==================== Ehlers filters ====================

# Window of the Ema used to smooth the Fisher transform input
DEFAULT_FISHER_MA_LEN = 5

DEFAULT_LAGUERRE_GAMMA = 0.8

# Low-pass stage of the roofing filter
DEFAULT_ROOFING_SUPER_SMOOTHER_LEN = 10

# Fisher transform input is clamped to avoid ln(0)
FISHER_CLAMP = 0.99


# ==================== Factory defaults ====================

DEFAULT_WINDOW_LEN = 14
