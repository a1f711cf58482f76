"""Base classes used by the template engine."""


import contextvars
import inspect
import types
from abc import ABCMeta, abstractmethod
from collections.abc import Iterable, Mapping
from contextlib import contextmanager

from facet.errors import RenderTypeError


class Context:

    """
    The ambient scope of a template.

    Instance-scoped values are looked up in assigns. Subclass to provide
    helper methods to templates.
    """

    def __init__(self, **assigns):
        """Initializes the Context."""
        self.assigns = assigns

    def get_instance_scoped(self, name):
        """Returns the named instance-scoped value, or None if it is not set."""
        return self.assigns.get(name)


# The context of the render or compile currently running.
_current_context = contextvars.ContextVar("facet_context")


@contextmanager
def activate_context(context):
    """Makes context the current context for the duration of the block."""
    token = _current_context.set(context)
    try:
        yield context
    finally:
        _current_context.reset(token)


class ContextProxy:

    """
    The context seen by template source.

    Forwards to the context of the render currently running, so that one
    compiled template can be shared by renders with different contexts.
    Outside of a render, the context the template was compiled with is used.
    """

    __slots__ = ("_default",)

    def __init__(self, default):
        """Initializes the ContextProxy."""
        self._default = default

    def get_current(self):
        """Returns the context that attribute access is forwarded to."""
        return _current_context.get(self._default)

    def __getattr__(self, name):
        return getattr(self.get_current(), name)

    def __repr__(self):
        return "<ContextProxy for {!r}>".format(self.get_current())


def is_instance_scoped(data_ref):
    """Checks whether the data reference is resolved against the context."""
    return isinstance(data_ref, str) and data_ref.startswith("@")


def is_collection(data):
    """Checks whether the data should be rendered as a collection."""
    return isinstance(data, Iterable) and not isinstance(data, (str, bytes, Mapping))


def fetch(data, name):
    """
    Reads the named value from data.

    Mappings are read by key. Anything else is read as an attribute, and
    bound methods, including builtin ones, are called with no arguments.
    """
    if data is None:
        raise RenderTypeError("Cannot read {!r} from None.".format(name))
    if isinstance(data, Mapping):
        try:
            return data[name]
        except KeyError:
            raise RenderTypeError("{!r} has no key {!r}.".format(data, name)) from None
    try:
        value = getattr(data, name)
    except AttributeError as ex:
        raise RenderTypeError("{!r} has no attribute {!r}.".format(data, name)) from ex
    if inspect.ismethod(value) or (inspect.isbuiltin(value) and getattr(value, "__self__", None) is data):
        return value()
    return value


class Node(metaclass=ABCMeta):

    """A node in a compiled template."""

    __slots__ = ()

    @abstractmethod
    def render(self, renderer, data, output):
        """Renders the node against data, writing into the output mapping."""

    def __setattr__(self, name, value):
        raise AttributeError("{} nodes are immutable.".format(self.__class__.__name__))

    def _init(self, **values):
        for name, value in values.items():
            object.__setattr__(self, name, value)


class AttributeNode(Node):

    """Copies attributes of the object, keyed by output name."""

    __slots__ = ("attributes",)

    def __init__(self, attributes):
        """Initializes the AttributeNode from a mapping of output key to source name."""
        self._init(attributes=types.MappingProxyType(dict(attributes)))

    def render(self, renderer, data, output):
        """Renders the AttributeNode."""
        for key, source in self.attributes.items():
            output[key] = fetch(data, source)

    def __repr__(self):
        return "AttributeNode({!r})".format(dict(self.attributes))


class CodeNode(Node):

    """
    Calls a block with the object.

    A CodeNode with no name merges the mapping returned by its block into the
    output, rather than nesting it under a key.
    """

    __slots__ = ("name", "block", "condition",)

    def __init__(self, name, block, condition=None):
        """Initializes the CodeNode."""
        self._init(name=name, block=block, condition=condition)

    @property
    def is_merge(self):
        """Whether the block result is merged into the output rather than nested."""
        return self.name is None

    def render(self, renderer, data, output):
        """Renders the CodeNode."""
        if self.condition is not None and not self.condition(data):
            return
        value = self.block(data)
        if self.is_merge:
            if not isinstance(value, Mapping):
                raise RenderTypeError("A merge block must return a mapping, not {!r}.".format(value))
            output.update(value)
        else:
            output[self.name] = value

    def __repr__(self):
        return "CodeNode({!r})".format(self.name)


class ConditionNode(Node):

    """Renders nested nodes into the same mapping when a predicate holds."""

    __slots__ = ("predicate", "nodes",)

    def __init__(self, predicate, nodes):
        """Initializes the ConditionNode."""
        self._init(predicate=predicate, nodes=tuple(nodes))

    def render(self, renderer, data, output):
        """Renders the ConditionNode."""
        if self.predicate(data):
            renderer.render_nodes(data, self.nodes, output)

    def __repr__(self):
        return "ConditionNode({!r})".format(list(self.nodes))


class ChildNode(Node):

    """
    Renders an associated object.

    The association is nested under name, unless the node is glue, in which
    case its keys are merged into the output.
    """

    __slots__ = ("name", "data_ref", "nodes", "is_glue",)

    def __init__(self, name, data_ref, nodes, is_glue=False):
        """Initializes the ChildNode."""
        self._init(name=name, data_ref=data_ref, nodes=tuple(nodes), is_glue=is_glue)

    def render(self, renderer, data, output):
        """Renders the ChildNode."""
        associated = renderer.resolve(self.data_ref, data)
        if self.is_glue:
            renderer.render_nodes(associated, self.nodes, output)
        elif is_collection(associated):
            output[self.name] = renderer.render_collection(associated, self.nodes)
        else:
            output[self.name] = renderer.render_resource(associated, self.nodes)

    def __repr__(self):
        if self.is_glue:
            return "ChildNode(glue {!r})".format(self.data_ref)
        return "ChildNode({!r} from {!r})".format(self.name, self.data_ref)


class CompiledTemplate:

    """
    A compiled template.

    Holds where the rendered data comes from, the root name and cache key used
    by the formatting layer, and the ordered node list. Nodes are only ever
    appended, and only while the template is being compiled.
    """

    __slots__ = ("data_ref", "root_name", "cache_key", "nodes", "name",)

    def __init__(self, name="__string__"):
        """Initializes the CompiledTemplate."""
        self.name = name
        self.data_ref = None
        self.root_name = None
        self.cache_key = False
        self.nodes = []

    def add_node(self, node):
        """Appends a node to the template."""
        self.nodes.append(node)

    def extend(self, nodes):
        """Appends all the given nodes to the template, after the existing ones."""
        self.nodes.extend(nodes)

    def __getitem__(self, index):
        return self.nodes[index]

    def __iter__(self):
        return iter(self.nodes)

    def __len__(self):
        return len(self.nodes)

    def __repr__(self):
        return "<CompiledTemplate {!r}>".format(self.name)
