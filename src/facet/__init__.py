"""
The facet templating system.

Declarative templates that project objects into JSON-compatible data.
Templates are compiled once, and rendered many times.
"""

from facet.base import Context, CompiledTemplate
from facet.compiler import Compiler, default_compiler
from facet.directives import DEFAULT_DIRECTIVES
from facet.errors import TemplateError, TemplateCompileError, TemplateDoesNotExist, RenderTypeError
from facet.loader import Loader, DebugLoader, Source, MemorySource, DirectorySource
from facet.renderer import MISSING, Renderer


__all__ = ("default_compiler", "compile", "render", "make_loader",)


compile = default_compiler.compile


def render(template, context=None, data=MISSING):
    """
    Compiles and renders the given template string against the context.

    This is just a shortcut for Renderer(context).render(facet.compile(template, context), data).
    """
    return Renderer(context).render(compile(template, context), data)


def make_loader(*sources, loader_cls=Loader, compiler=default_compiler, **kwargs):
    """Factory method for creating loaders."""
    # Create the sources.
    source_objs = []
    for source in sources:
        if isinstance(source, Source):
            source_objs.append(source)
        elif isinstance(source, str):
            source_objs.append(DirectorySource(source))
        else:
            raise TypeError("A source should be a str or a Source instance, not {!r}.".format(source))
    # Instantiate the loader.
    return loader_cls(source_objs, compiler, **kwargs)
