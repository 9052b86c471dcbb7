"""
Static configuration data for the Methodic interpreter.
This includes the token names and string rules shared by the lexer and parser,
and the evaluation limits.
"""

# Stray ASCII punctuation is emitted as a SYMBOL token and rejected by the parser.
SYMBOL_TOKEN = "SYMBOL"
EOF_TOKEN = "EOF"

STRING_QUOTES = {'"', "'"}
STRING_ESCAPES = {"n": "\n", "t": "\t", "\\": "\\", '"': '"', "'": "'"}

IMPLICIT_SUBJECT = "it"

# Calls deeper than this fail with a STACK_OVERFLOW error.
MAX_CALL_DEPTH = 500
# Upper bound of Python frames the evaluator uses per Methodic call,
# used to size the interpreter recursion limit during evaluation.
FRAMES_PER_CALL = 12
