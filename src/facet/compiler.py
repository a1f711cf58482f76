"""The template compiler."""

import inspect
import traceback
from functools import partial

from facet.base import AttributeNode, CompiledTemplate, ContextProxy, activate_context
from facet.directives import DEFAULT_DIRECTIVES
from facet.errors import TemplateCompileError, TemplateDoesNotExist


class PendingDirective:

    """A directive that still needs its nested block."""

    __slots__ = ("run", "description", "factory", "lineno",)

    def __init__(self, run, description, factory, lineno):
        """Initializes the PendingDirective."""
        self.run = run
        self.description = description
        self.factory = factory
        self.lineno = lineno

    def missing_message(self):
        return "{} requires a nested block.".format(self.description)


class BlockDirective(PendingDirective):

    """A directive whose nested nodes are compiled from a with block."""

    __slots__ = ()

    def missing_message(self):
        return "{} should be used as a with block.".format(self.description)

    def __enter__(self):
        self.run.enter_block(self)
        return self

    def __exit__(self, exc_type, exc_value, tb):
        nodes = self.run.exit_block()
        if exc_type is None:
            self.run.add_node(self.factory(nodes))
        return False


class DecoratorDirective(PendingDirective):

    """A directive whose block is the function it decorates."""

    __slots__ = ()

    def missing_message(self):
        return "{} should decorate a function.".format(self.description)

    def __call__(self, func):
        if not callable(func):
            raise TypeError("{} can only decorate a callable, not {!r}.".format(self.description, func))
        self.run.resolve_pending(self)
        self.run.add_node(self.factory(func))
        return func


class CompilerRun:

    """The state held by a compiler during a run."""

    __slots__ = ("template", "name", "context", "directives", "loader", "_stack", "_pending",)

    def __init__(self, name, context, directives, loader):
        """Initializes the CompilerRun."""
        self.template = CompiledTemplate(name)
        self.name = name
        self.context = context
        self.directives = directives
        self.loader = loader
        self._stack = [self.template.nodes]
        self._pending = []

    @property
    def nodes(self):
        """The node list that directives currently append to."""
        return self._stack[-1]

    def add_node(self, node):
        self.nodes.append(node)

    def extend(self, nodes):
        self.nodes.extend(nodes)

    def add_attributes(self, attributes):
        """
        Adds an AttributeNode.

        Keys already copied by earlier attribute directives in the same block
        are dropped from them, so the last directive wins.
        """
        nodes = self.nodes
        for index, node in enumerate(nodes):
            if isinstance(node, AttributeNode) and not attributes.keys().isdisjoint(node.attributes):
                nodes[index] = AttributeNode({
                    key: source
                    for key, source in node.attributes.items()
                    if key not in attributes
                })
        nodes[:] = [node for node in nodes if not isinstance(node, AttributeNode) or node.attributes]
        nodes.append(AttributeNode(attributes))

    def lineno(self):
        """Returns the line of the template that is currently executing."""
        frame = inspect.currentframe()
        while frame is not None:
            if frame.f_code.co_filename == self.name:
                return frame.f_lineno
            frame = frame.f_back
        return None

    def block(self, description, factory):
        """Returns a with block that builds a node from its nested nodes."""
        directive = BlockDirective(self, description, factory, self.lineno())
        self._pending.append(directive)
        return directive

    def decorator(self, description, factory):
        """Returns a decorator that builds a node from the decorated function."""
        directive = DecoratorDirective(self, description, factory, self.lineno())
        self._pending.append(directive)
        return directive

    def resolve_pending(self, directive):
        if directive not in self._pending:
            raise SyntaxError("{} can only be used once.".format(directive.description))
        self._pending.remove(directive)

    def enter_block(self, directive):
        self.resolve_pending(directive)
        self._stack.append([])

    def exit_block(self):
        return self._stack.pop()

    def load_template(self, template_name):
        """Loads another template through the loader."""
        if self.loader is None:
            raise TemplateDoesNotExist(
                "Cannot load template named {!r}, as no loader was given to the compiler.".format(template_name),
                self.name,
                self.lineno(),
            )
        return self.loader.load(template_name, self.context)

    def make_namespace(self):
        """Creates the namespace the template source is executed in."""
        namespace = {
            name: partial(directive, self)
            for name, directive in self.directives.items()
        }
        namespace["context"] = ContextProxy(self.context)
        return namespace

    def error_lineno(self, ex):
        """Finds the innermost template line in the traceback of ex."""
        lineno = None
        for frame, frame_lineno in traceback.walk_tb(ex.__traceback__):
            if frame.f_code.co_filename == self.name:
                lineno = frame_lineno
        return lineno

    def compile_source(self, source):
        """Executes the template source, returning the compiled template."""
        try:
            code = compile(source, self.name, "exec")
        except SyntaxError as ex:
            raise TemplateCompileError(ex.msg, self.name, ex.lineno) from ex
        try:
            with activate_context(self.context):
                exec(code, self.make_namespace())
        except (TemplateCompileError, TemplateDoesNotExist):
            raise
        except Exception as ex:
            raise TemplateCompileError(str(ex), self.name, self.error_lineno(ex)) from ex
        # Every block directive must have been given its block.
        if self._pending:
            directive = self._pending[0]
            raise TemplateCompileError(directive.missing_message(), self.name, directive.lineno)
        return self.template


class Compiler:

    """A template compiler."""

    __slots__ = ("_directives", "_loader",)

    def __init__(self, directives=DEFAULT_DIRECTIVES, loader=None):
        """
        Initializes the Compiler.

        The loader is used to resolve extends and partials. Without one, only
        self-contained templates can be compiled.
        """
        self._directives = directives
        self._loader = loader

    def compile(self, source, context=None, name="__string__", loader=None):
        """Compiles the template source."""
        if loader is None:
            loader = self._loader
        run = CompilerRun(name, context, self._directives, loader)
        return run.compile_source(source)


# The default compiler, using the default set of directives.
default_compiler = Compiler()
