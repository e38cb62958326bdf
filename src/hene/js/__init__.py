"""JavaScript syntax tree, tree-sitter front end and emitter."""

from hene.js.nodes import emit as emit
from hene.js.parser import JSSyntaxError as JSSyntaxError
from hene.js.parser import parse_expression as parse_expression
from hene.js.parser import parse_module as parse_module
