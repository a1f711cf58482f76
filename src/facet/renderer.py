"""Renders compiled templates against live objects."""


from facet.base import activate_context, fetch, is_collection, is_instance_scoped


class _Missing:

    __slots__ = ()

    def __repr__(self):
        return "MISSING"


# Marks that no data was passed to a render call.
MISSING = _Missing()


class Renderer:

    """
    Renders node trees to nested dicts and lists.

    A renderer only reads the templates it is given, so one compiled template
    can be rendered by any number of renderers at once.
    """

    __slots__ = ("context",)

    def __init__(self, context=None):
        """Initializes the Renderer."""
        self.context = context

    def get_instance_scoped(self, data_ref):
        """Looks up an "@name" reference in the context."""
        if self.context is None:
            return None
        return self.context.get_instance_scoped(data_ref[1:])

    def resolve(self, data_ref, data):
        """Resolves a data reference against the context or the current object."""
        if is_instance_scoped(data_ref):
            return self.get_instance_scoped(data_ref)
        return fetch(data, data_ref)

    def resolve_root(self, template):
        """Resolves the object a template is rendered against."""
        data_ref = template.data_ref
        if data_ref is None or data_ref is False:
            return None
        return self.resolve(data_ref, self.context)

    def render(self, template, data=MISSING):
        """
        Renders the template.

        If no data is given, it is resolved from the template's data reference.
        Iterable data renders as a list of dicts, anything else as a dict.
        """
        if data is MISSING:
            data = self.resolve_root(template)
        if is_collection(data):
            return self.render_collection(data, template.nodes)
        return self.render_resource(data, template.nodes)

    def render_nodes(self, data, nodes, output):
        """
        Renders the nodes in order into the output dict.

        Blocks called while rendering see this renderer's context.
        """
        with activate_context(self.context):
            for node in nodes:
                node.render(self, data, output)
        return output

    def render_resource(self, data, nodes):
        """Renders a single object to a dict."""
        return self.render_nodes(data, nodes, {})

    def render_collection(self, collection, nodes):
        """Renders each item of the collection to a dict."""
        return [self.render_resource(item, nodes) for item in collection]
