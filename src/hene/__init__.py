"""hene: compiles HeneElement component classes into custom elements."""

# Configuration
from hene.context import CompileOptions as CompileOptions
from hene.env import DEFAULT_MARKER as DEFAULT_MARKER
from hene.env import env as env

# Errors
from hene.errors import CompileError as CompileError
from hene.errors import Diagnostic as Diagnostic
from hene.errors import Location as Location
from hene.errors import Reporter as Reporter

# Compilation
from hene.pipeline import CompileFailed as CompileFailed
from hene.pipeline import compile_source as compile_source
from hene.pipeline import compile_strict as compile_strict
from hene.pipeline import should_compile as should_compile
from hene.pipeline import transform as transform

__version__ = "0.1.0"
