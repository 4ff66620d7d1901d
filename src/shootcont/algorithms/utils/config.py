# Integration defaults for shooting problems
DEFAULT_METHOD = "DOP853"
DEFAULT_RELTOL = 1e-6
DEFAULT_ABSTOL = 1e-8

# Suffixes of the continuation variables created for a shooting problem
STATE_SUFFIX = "u"
PARAM_SUFFIX = "p"
TSPAN_SUFFIX = "tspan"
