"""Objects shared by the test cases."""

from facet import Context


class User:

    def __init__(self, id=None, name=None, **extra):
        self.id = id
        self.name = name
        for key, value in extra.items():
            setattr(self, key, value)

    def initials(self):
        return "".join(part[:1] for part in self.name.split())


class Address:

    def __init__(self, street, city):
        self.street = street
        self.city = city


class ViewContext(Context):

    """A context with a helper method, like a view would provide."""

    def current_user(self):
        return self.get_instance_scoped("user")

    def helper_value(self):
        return "helped"


def extract_attributes(nodes):
    """Returns the attribute mappings of a list of AttributeNodes."""
    return [dict(node.attributes) for node in nodes]
