from importlib.resources import files as pkg_files

from lark import Lark

from mti.config.config import SYMBOL_TOKEN


def _load_grammar() -> str:
    # The path is relative to the 'mti.parser.core' subpackage
    return (pkg_files("mti.parser.core") / "methodic.lark").read_text()


class MethodicPostLex:
    """
    Passes tokens through unchanged.

    Lark drops terminals that no rule references unless a post-lexer asks to
    keep them; SYMBOL has to reach the parser so that it can be reported there.
    """

    always_accept = (SYMBOL_TOKEN,)

    def process(self, stream):
        return stream


# Note here the start="start" parameter must match the "start" rule in the .lark file
LARK_PARSER = Lark(_load_grammar(), start="start", parser="lalr", lexer="basic", postlex=MethodicPostLex())
