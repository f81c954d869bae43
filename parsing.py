"""
Term-notation loader for B expression trees

Expression trees are written as constructor terms, for example

    LETV ("x", NUM 3, ADD (VAR "x", NUM 1))

Lists use [a; b], record fields ("name", term), comments (* ... *),
and top-level terms may be separated by ;;
"""

from typing import Any, Dict, List

# Import pyparsing with error handling
try:
    from pyparsing import (
        Forward, Group, Keyword, Optional as PyParsingOptional, ParseException,
        ParserElement, QuotedString, Regex, StringEnd, Suppress, ZeroOrMore,
        delimitedList
    )
    # Enable packrat parsing for performance
    ParserElement.enablePackrat()
except ImportError:
    raise ImportError("pyparsing library not found. Install with: pip install pyparsing")

import syntax
from error_handling import BParseError, enhance_parse_exception


BINARY_CONSTRUCTORS = ("ADD", "SUB", "MUL", "DIV", "EQUAL", "LESS")


def _binary_action(node_type: str):
    def action(t):
        return syntax.make_binary(node_type, t[0], t[1])
    return action


def _record_action(t):
    return syntax.make_record([(field[0], field[1]) for field in t[0]])


class BTermGrammar:
    """Constructor-term grammar using pyparsing"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self._setup_grammar()

    def _setup_grammar(self):
        term = Forward()

        lpar, rpar = Suppress("("), Suppress(")")
        lbrack, rbrack = Suppress("["), Suppress("]")
        comma, semi = Suppress(","), Suppress(";")

        name = QuotedString('"', escChar='\\')
        integer = Regex(r'-?\d+').setParseAction(lambda t: int(t[0]))
        comment = Suppress(Regex(r'\(\*[\s\S]*?\*\)'))

        def kw(word):
            return Keyword(word).suppress()

        def tuple_of(*parts):
            body = parts[0]
            for part in parts[1:]:
                body = body + comma + part
            return lpar + body + rpar

        def list_of(element):
            return Group(
                lbrack +
                PyParsingOptional(delimitedList(element, ";")) +
                PyParsingOptional(semi) +
                rbrack
            )

        def paren_or_bare(element):
            return element | (lpar + element + rpar)

        # Constants and variables
        num = (kw("NUM") + paren_or_bare(integer)).setParseAction(lambda t: syntax.make_num(t[0]))
        true = Keyword("TRUE").setParseAction(lambda: syntax.make_true())
        false = Keyword("FALSE").setParseAction(lambda: syntax.make_false())
        unit = Keyword("UNIT").setParseAction(lambda: syntax.make_unit())
        var = (kw("VAR") + paren_or_bare(name)).setParseAction(lambda t: syntax.make_var(t[0]))

        # Operators
        binary = [
            (kw(tag) + tuple_of(term, term)).setParseAction(_binary_action(tag))
            for tag in BINARY_CONSTRUCTORS
        ]
        not_ = (kw("NOT") + term).setParseAction(lambda t: syntax.make_not(t[0]))

        # Control
        seq = (kw("SEQ") + tuple_of(term, term)).setParseAction(
            lambda t: syntax.make_seq(t[0], t[1]))
        if_ = (kw("IF") + tuple_of(term, term, term)).setParseAction(
            lambda t: syntax.make_if(t[0], t[1], t[2]))
        while_ = (kw("WHILE") + tuple_of(term, term)).setParseAction(
            lambda t: syntax.make_while(t[0], t[1]))

        # Bindings and procedures
        letv = (kw("LETV") + tuple_of(name, term, term)).setParseAction(
            lambda t: syntax.make_letv(t[0], t[1], t[2]))
        letf = (kw("LETF") + tuple_of(name, list_of(name), term, term)).setParseAction(
            lambda t: syntax.make_letf(t[0], list(t[1]), t[2], t[3]))
        callv = (kw("CALLV") + tuple_of(name, list_of(term))).setParseAction(
            lambda t: syntax.make_callv(t[0], list(t[1])))
        callr = (kw("CALLR") + tuple_of(name, list_of(name))).setParseAction(
            lambda t: syntax.make_callr(t[0], list(t[1])))

        # Records and assignment
        record_field = Group(tuple_of(name, term))
        record = (kw("RECORD") + paren_or_bare(list_of(record_field))).setParseAction(_record_action)
        field = (kw("FIELD") + tuple_of(term, name)).setParseAction(
            lambda t: syntax.make_field(t[0], t[1]))
        assign = (kw("ASSIGN") + tuple_of(name, term)).setParseAction(
            lambda t: syntax.make_assign(t[0], t[1]))
        assignf = (kw("ASSIGNF") + tuple_of(term, name, term)).setParseAction(
            lambda t: syntax.make_assignf(t[0], t[1], t[2]))
        write = (kw("WRITE") + term).setParseAction(lambda t: syntax.make_write(t[0]))

        alternatives = [num, true, false, unit, var] + binary + [
            not_, seq, if_, while_, letv, letf, callv, callr,
            record, field, assign, assignf, write
        ]
        constructor = alternatives[0]
        for alternative in alternatives[1:]:
            constructor = constructor | alternative

        term <<= constructor | (lpar + term + rpar)

        separator = PyParsingOptional(Suppress(";;"))
        self.term = term
        self.expression = term + separator + StringEnd()
        self.program = ZeroOrMore(term + separator) + StringEnd()

        self.expression.ignore(comment)
        self.program.ignore(comment)

        if self.debug:
            self.term.setDebug()

    def parse_program(self, text: str) -> List[Dict]:
        """Parse every top-level term in text"""
        try:
            result = self.program.parseString(text, parseAll=True)
        except ParseException as exc:
            raise enhance_parse_exception(exc) from exc
        return list(result)

    def parse_expression(self, text: str) -> Dict:
        """Parse exactly one term"""
        try:
            result = self.expression.parseString(text, parseAll=True)
        except ParseException as exc:
            raise enhance_parse_exception(exc) from exc
        return result[0]


class BTermParser:
    """Loads expression trees from strings and files"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.grammar = BTermGrammar(debug)

    def parse_file(self, filepath: str) -> List[Dict]:
        """Parse a term-notation file"""
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise BParseError(f"File not found: {filepath}")
        except UnicodeDecodeError as e:
            raise BParseError(f"Cannot decode file {filepath}: {e}")
        return self.grammar.parse_program(content)

    def parse_string(self, text: str) -> List[Dict]:
        """Parse term-notation source from a string"""
        return self.grammar.parse_program(text)

    def parse_expression(self, text: str) -> Dict:
        """Parse a single term"""
        return self.grammar.parse_expression(text)


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> BTermParser:
    """Create a term-notation parser"""
    return BTermParser(debug=debug)


def create_debug_parser() -> BTermParser:
    """Create a term-notation parser with debug enabled"""
    return BTermParser(debug=True)


def _is_tree(item: Any) -> bool:
    return isinstance(item, dict) and 'type' in item


def pretty_print_tree(node: Dict, indent: int = 0) -> str:
    """Pretty print an expression tree for debugging"""
    pad = "  " * indent
    node_type = node['type']
    value = node['value']

    if value is None:
        return f"{pad}{node_type}\n"
    if _is_tree(value):
        return f"{pad}{node_type}\n" + pretty_print_tree(value, indent + 1)
    if node_type == "RECORD":
        result = f"{pad}{node_type}\n"
        for name, field_ast in value:
            result += f"{pad}  {name!r} =\n" + pretty_print_tree(field_ast, indent + 2)
        return result
    if not isinstance(value, dict):
        return f"{pad}{node_type}({value!r})\n"

    attrs = []
    children = []
    for item in value.values():
        if _is_tree(item):
            children.append(item)
        elif isinstance(item, list) and item and all(_is_tree(x) for x in item):
            children.extend(item)
        else:
            attrs.append(repr(item))

    result = f"{pad}{node_type}"
    if attrs:
        result += f"({', '.join(attrs)})"
    result += "\n"
    for child in children:
        result += pretty_print_tree(child, indent + 1)
    return result
