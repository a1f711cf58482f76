"""A caching template loader that allows disk-based templates to be used."""


import logging
import os
import threading
from abc import ABCMeta, abstractmethod

from facet.compiler import default_compiler
from facet.errors import TemplateDoesNotExist
from facet.renderer import MISSING, Renderer


logger = logging.getLogger(__name__)


class Source(metaclass=ABCMeta):

    """A source of template data."""

    __slots__ = ()

    @abstractmethod
    def load_source(self, template_name):
        """
        Loads the template source code for the template of the given name.

        If no source code can be found, returns None.
        """


class MemorySource(Source):

    """A template source that loads from memory."""

    __slots__ = ("templates",)

    def __init__(self, templates):
        """Initializes the MemorySource from a dict of template source strings."""
        self.templates = templates

    def load_source(self, template_name):
        """Loads the source from the memory template dict."""
        return self.templates.get(template_name)

    def __str__(self):
        """Returns a string representation."""
        return "<memory>"


class DirectorySource(Source):

    """A template source that loads from a directory on disk."""

    __slots__ = ("dirname", "suffix",)

    def __init__(self, dirname, suffix=""):
        """
        Initializes the DirectorySource.

        The suffix is appended to template names that do not already end
        with it. On windows, the dirname should be specified using
        forward-slashes.
        """
        self.dirname = dirname
        self.suffix = suffix

    def load_source(self, template_name):
        """Loads the source from disk."""
        if self.suffix and not template_name.endswith(self.suffix):
            template_name += self.suffix
        template_path = os.path.normpath(os.path.join(self.dirname, template_name))
        if os.path.exists(template_path):
            with open(template_path, "r") as template_file:
                return template_file.read()
        return None

    def __str__(self):
        """Returns a string representation."""
        return self.dirname


def wrap_root(result, template, include_root=True):
    """Wraps a rendered value tree under the template's root name."""
    if include_root and template.root_name:
        return {template.root_name: result}
    return result


class DebugLoader:

    """
    A template loader that doesn't cache compiled templates.

    Terrible performance, but great for debugging.
    """

    __slots__ = ("_sources", "_compiler", "_include_root",)

    def __init__(self, sources, compiler=default_compiler, include_root=True):
        """
        Initializes the Loader.

        When include_root is true, rendered templates are wrapped in a dict
        keyed by their root name.
        """
        # Initialize the sources.
        self._sources = []
        for source in sources:
            if isinstance(source, Source):
                self._sources.append(source)
            elif isinstance(source, str):
                self._sources.append(DirectorySource(source))
            else:
                raise TypeError("Arguments for source should be a str or a Source instance, not {!r}.".format(source))
        # And the rest.
        self._compiler = compiler
        self._include_root = include_root

    def _load(self, template_name, context):
        """Compiles the named template from the first source that has it."""
        for source in self._sources:
            template_src = source.load_source(template_name)
            if template_src is not None:
                logger.debug("Compiling template %r from %s", template_name, source)
                return self._compiler.compile(template_src, context, template_name, loader=self)
        source_name_str = ", ".join(str(source) for source in self._sources)
        raise TemplateDoesNotExist("Could not find a template named {!r} in any of {}.".format(template_name, source_name_str))

    def load(self, template_name, context=None):
        """
        Loads and returns the named compiled template.

        On Windows, the forward slash '/' should be used as a path separator.
        """
        return self._load(template_name, context)

    def render(self, template_name, context=None, data=MISSING):
        """
        Loads and renders the named template.

        The result is wrapped under the template's root name, unless the
        loader was created with include_root=False.
        """
        template = self.load(template_name, context)
        result = Renderer(context).render(template, data)
        return wrap_root(result, template, self._include_root)


class Loader(DebugLoader):

    """
    A template loader.

    Compiled templates are cached for performance. Each template is compiled
    at most once, even when loaded from several threads.
    """

    __slots__ = ("_cache", "_lock",)

    def __init__(self, *args, **kwargs):
        """Initializes the loader."""
        super(Loader, self).__init__(*args, **kwargs)
        self._cache = {}
        # Re-entrant, since extends and partials load while compiling.
        self._lock = threading.RLock()

    def clear_cache(self):
        """Clears the template cache."""
        with self._lock:
            self._cache.clear()

    def _load(self, template_name, context):
        """A caching version of the debug loader's load method."""
        try:
            return self._cache[template_name]
        except KeyError:
            pass
        with self._lock:
            if template_name in self._cache:
                logger.debug("Template %r was compiled by another thread", template_name)
                return self._cache[template_name]
            template = super(Loader, self)._load(template_name, context)
            self._cache[template_name] = template
            return template
