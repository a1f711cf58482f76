"""The default built-in directives."""

import functools
from collections.abc import Mapping

from facet.base import ChildNode, CodeNode, ConditionNode, is_instance_scoped


# Marks an option that was not passed to a directive.
NOT_GIVEN = object()


def check_data_ref(data_ref):
    """Makes sure that data_ref is a usable reference."""
    if not isinstance(data_ref, str):
        raise TypeError("A data reference should be a str, not {!r}.".format(data_ref))
    if not data_ref.lstrip("@"):
        raise ValueError("{!r} is not a valid data reference.".format(data_ref))


def check_name(name, allow_false=False):
    """Makes sure that name can be used as an output key."""
    if isinstance(name, str) and name:
        return
    if allow_false and name is False:
        return
    raise TypeError("{!r} is not a valid output name.".format(name))


def extract_data_and_name(data_ref):
    """
    Splits a reference into the data reference and its default output name.

    "@users" gives ("@users", "users"), "users" gives ("users", "users") and
    {"@users": "authors"} gives ("@users", "authors"). False gives (False, None).
    """
    if data_ref is False:
        return False, None
    if isinstance(data_ref, Mapping):
        if len(data_ref) != 1:
            raise ValueError("An alias should be a single {{reference: name}} pair, not {!r}.".format(data_ref))
        (data_ref, name), = data_ref.items()
        check_data_ref(data_ref)
        check_name(name)
        return data_ref, name
    check_data_ref(data_ref)
    if is_instance_scoped(data_ref):
        return data_ref, data_ref[1:]
    return data_ref, data_ref


def object_directive(run, data_ref, *, root=NOT_GIVEN):
    """Sets the object the template renders, and the root name."""
    data_ref, name = extract_data_and_name(data_ref)
    if root is not NOT_GIVEN:
        check_name(root, allow_false=True)
        name = root
    run.template.data_ref = data_ref
    run.template.root_name = name


def collection_directive(run, data_ref, *, root=NOT_GIVEN):
    """Sets the collection the template renders, and the root name."""
    object_directive(run, data_ref, root=root)


def root_directive(run, name):
    """Overrides the root name. False disables root wrapping."""
    check_name(name, allow_false=True)
    run.template.root_name = name


def cache_directive(run, key=None):
    """Enables caching, with an optional function that builds the cache key."""
    if key is not None and not callable(key):
        raise TypeError("A cache key should be callable, not {!r}.".format(key))
    run.template.cache_key = key


def attribute_directive(run, *names, as_=None):
    """
    Copies attributes of the object.

    Each name is either a str, copied under the same key, or a dict mapping
    attribute names to output keys. The as_ option aliases a single name.
    """
    if not names:
        raise TypeError("attribute() takes at least one attribute name.")
    attributes = {}
    if as_ is not None:
        if len(names) != 1 or not isinstance(names[0], str):
            raise TypeError("The as_ option can only alias a single attribute name.")
        check_name(names[0])
        check_name(as_)
        attributes[as_] = names[0]
    else:
        for name in names:
            if isinstance(name, Mapping):
                if not name:
                    raise ValueError("An attribute alias cannot be empty.")
                for source, alias in name.items():
                    check_name(source)
                    check_name(alias)
                    attributes[alias] = source
            else:
                check_name(name)
                attributes[name] = name
    run.add_attributes(attributes)


def child_directive(run, data_ref, *, root=NOT_GIVEN, partial=None):
    """
    Nests an associated object under its own key.

    The nested nodes come from the following with block, or from the named
    partial template.
    """
    data_ref, name = extract_data_and_name(data_ref)
    if data_ref is False:
        raise TypeError("A child needs a data reference.")
    if root is not NOT_GIVEN:
        check_name(root)
        name = root
    if partial is not None:
        template = run.load_template(partial)
        run.add_node(ChildNode(name, data_ref, template.nodes))
        return None
    return run.block("child({!r})".format(data_ref), functools.partial(ChildNode, name, data_ref))


def glue_directive(run, data_ref):
    """Merges the keys of an associated object into the current output."""
    check_data_ref(data_ref)
    return run.block("glue({!r})".format(data_ref), functools.partial(ChildNode, None, data_ref, is_glue=True))


def node_directive(run, name=None, block=None, *, if_=None):
    """
    Adds the result of calling block with the object.

    Without a name the block must return a dict, which is merged into the
    output. Without a block, returns a decorator.
    """
    if block is None and callable(name):
        name, block = None, name
    if name is not None:
        check_name(name)
    if if_ is not None and not callable(if_):
        raise TypeError("The if_ option should be callable, not {!r}.".format(if_))
    make_node = functools.partial(CodeNode, name, condition=if_)
    if block is None:
        return run.decorator("node({!r})".format(name), make_node)
    if not callable(block):
        raise TypeError("A node block should be callable, not {!r}.".format(block))
    run.add_node(make_node(block))
    return block


def merge_directive(run, block=None, *, if_=None):
    """Merges the dict returned by block into the output."""
    return node_directive(run, None, block, if_=if_)


def condition_directive(run, predicate):
    """Renders the following with block only when predicate holds for the object."""
    if not callable(predicate):
        raise TypeError("A condition should be callable, not {!r}.".format(predicate))
    return run.block("condition()", functools.partial(ConditionNode, predicate))


def extends_directive(run, template_name):
    """Appends all the nodes of another template."""
    if not isinstance(template_name, str):
        raise TypeError("A template name should be a str, not {!r}.".format(template_name))
    run.extend(run.load_template(template_name).nodes)


# The set of default directives.
DEFAULT_DIRECTIVES = {
    "object": object_directive,
    "collection": collection_directive,
    "root": root_directive,
    "cache": cache_directive,
    "attribute": attribute_directive,
    "attributes": attribute_directive,
    "child": child_directive,
    "glue": glue_directive,
    "node": node_directive,
    "merge": merge_directive,
    "condition": condition_directive,
    "extends": extends_directive,
}
