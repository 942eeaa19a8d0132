"""RT template compiler: HTML-like templates to React render functions."""

# Entry points
from react_templates.compiler import CompileContext as CompileContext
from react_templates.compiler import CompiledOutput as CompiledOutput
from react_templates.compiler import compile_output as compile_output
from react_templates.compiler import compile_template as compile_template
from react_templates.embedded import compile_embedded as compile_embedded

# Errors
from react_templates.errors import ConfigurationError as ConfigurationError
from react_templates.errors import Diagnostic as Diagnostic
from react_templates.errors import ParseError as ParseError
from react_templates.errors import Position as Position
from react_templates.errors import ResolutionError as ResolutionError
from react_templates.errors import RTError as RTError

# Markup
from react_templates.markup import parse_markup as parse_markup

# Configuration
from react_templates.options import CompileOptions as CompileOptions
from react_templates.options import ModuleFormat as ModuleFormat
from react_templates.options import PropTemplateSpec as PropTemplateSpec

__version__ = "0.1.0"
