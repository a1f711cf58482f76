import os
import tempfile
import threading
import unittest
from unittest import mock

import facet
from facet.compiler import default_compiler
from facet.errors import TemplateCompileError, TemplateDoesNotExist
from facet.loader import DebugLoader, DirectorySource, Loader, MemorySource, wrap_root
from facet.tests.helpers import Address, User, ViewContext


test_sources = (MemorySource({
    "users/base": "attributes('id', 'name')",
}), MemorySource({
    "users/base": "attribute('shadowed')",
    "users/show": "object('@user')\nextends('users/base')\nwith child('address', partial='addresses/base'):\n    pass",
    "users/index": "collection('@users')\nextends('users/base')",
    "users/unwrapped": "object('@user', root=False)\nextends('users/base')",
    "users/detail": "object('@user')\nextends('users/base')\nchild('address', partial='addresses/base')",
    "addresses/base": "attributes('street', 'city')",
    "broken": "attribute('id')\nattribute(None)",
}))


class TestLoader(unittest.TestCase):

    loader_cls = DebugLoader

    def setUp(self):
        self.loader = self.loader_cls(test_sources)
        self.user = User(1, "Marty")
        self.user.address = Address("9303 Lyon Drive", "Hill Valley")
        self.context = ViewContext(user=self.user, users=[self.user, User(2, "Doc")])

    def testLoad(self):
        template = self.loader.load("users/base")
        self.assertEqual(template.name, "users/base")
        self.assertEqual(len(template), 1)

    def testFirstSourceWins(self):
        self.assertEqual(self.loader.load("users/base")[0].attributes, {"id": "id", "name": "name"})

    def testTemplateDoesNotExist(self):
        self.assertRaises(TemplateDoesNotExist, lambda: self.loader.load("missing"))

    def testCompileError(self):
        with self.assertRaises(TemplateCompileError) as cm:
            self.loader.load("broken")
        self.assertEqual(cm.exception.name, "broken")
        self.assertEqual(cm.exception.lineno, 2)

    def testPartialWithBlock(self):
        # A partial child takes no block.
        self.assertRaises(TemplateCompileError, lambda: self.loader.load("users/show"))

    def testRender(self):
        self.assertEqual(self.loader.render("users/detail", self.context), {"user": {
            "id": 1,
            "name": "Marty",
            "address": {"street": "9303 Lyon Drive", "city": "Hill Valley"},
        }})

    def testRenderCollection(self):
        self.assertEqual(self.loader.render("users/index", self.context), {"users": [
            {"id": 1, "name": "Marty"},
            {"id": 2, "name": "Doc"},
        ]})

    def testRenderWithoutRoot(self):
        self.assertEqual(self.loader.render("users/unwrapped", self.context), {"id": 1, "name": "Marty"})
        loader = self.loader_cls(test_sources, include_root=False)
        self.assertEqual(loader.render("users/index", self.context), [
            {"id": 1, "name": "Marty"},
            {"id": 2, "name": "Doc"},
        ])

    def testRenderData(self):
        self.assertEqual(self.loader.render("users/base", data={"id": 3, "name": "Biff"}), {"id": 3, "name": "Biff"})

    def testInvalidSource(self):
        self.assertRaises(TypeError, lambda: self.loader_cls([1]))


class TestCachedLoader(TestLoader):

    loader_cls = Loader

    def testCache(self):
        self.assertEqual(len(self.loader._cache), 0)
        self.loader.load("users/base")
        self.assertEqual(len(self.loader._cache), 1)
        self.assertIs(self.loader.load("users/base"), self.loader.load("users/base"))
        self.assertEqual(len(self.loader._cache), 1)
        # Extended templates are cached too.
        self.loader.load("users/detail")
        self.assertEqual(set(self.loader._cache), {"users/base", "users/detail", "addresses/base"})
        self.loader.clear_cache()
        self.assertEqual(len(self.loader._cache), 0)

    def testCompilesOnce(self):
        compiler = mock.Mock(wraps=default_compiler)
        loader = Loader(test_sources, compiler)
        threads = [threading.Thread(target=loader.load, args=("users/base",)) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        self.assertEqual(compiler.compile.call_count, 1)

    def testContextPerRender(self):
        loader = Loader([MemorySource({"users/me": "object(False)\nnode('me', lambda u: context.current_user().name)"})])
        self.assertEqual(loader.render("users/me", ViewContext(user=User(1, "Alice"))), {"me": "Alice"})
        self.assertEqual(loader.render("users/me", ViewContext(user=User(2, "Bob"))), {"me": "Bob"})


class TestDirectorySource(unittest.TestCase):

    def testLoad(self):
        with tempfile.TemporaryDirectory() as dirname:
            os.mkdir(os.path.join(dirname, "users"))
            with open(os.path.join(dirname, "users", "base.facet"), "w") as template_file:
                template_file.write("object('@user')\nattributes('id', 'name')\n")
            loader = facet.make_loader(DirectorySource(dirname, suffix=".facet"))
            context = ViewContext(user=User(1, "Marty"))
            self.assertEqual(loader.render("users/base", context), {"user": {"id": 1, "name": "Marty"}})
            self.assertEqual(loader.render("users/base.facet", context), {"user": {"id": 1, "name": "Marty"}})
            self.assertRaises(TemplateDoesNotExist, lambda: loader.load("users/missing"))

    def testMakeLoader(self):
        with tempfile.TemporaryDirectory() as dirname:
            loader = facet.make_loader(dirname, loader_cls=DebugLoader, include_root=False)
            self.assertIsInstance(loader, DebugLoader)
        self.assertRaises(TypeError, lambda: facet.make_loader(1))


class TestWrapRoot(unittest.TestCase):

    def testWrapRoot(self):
        template = facet.compile("object('@user')")
        self.assertEqual(wrap_root({"id": 1}, template), {"user": {"id": 1}})
        self.assertEqual(wrap_root({"id": 1}, template, include_root=False), {"id": 1})
        self.assertEqual(wrap_root({"id": 1}, facet.compile("object('@user'); root(False)")), {"id": 1})
        self.assertEqual(wrap_root({"id": 1}, facet.compile("")), {"id": 1})


if __name__ == "__main__":
    unittest.main()
