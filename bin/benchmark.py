#!/usr/bin/env python3

import facet, timeit


class Item:

    def __init__(self, id):
        self.id = id
        self.name = "Item {}".format(id)
        self.tags = ["tag-{}".format(n) for n in range(3)]


TEMPLATES = {
    "items/base": "attributes('id', 'name')",
    "items/index": """
collection('@items')
extends('items/base')
node('tag_count', lambda item: len(item.tags))
with condition(lambda item: item.id % 2 == 0):
    attribute({'tags': 'even_tags'})
""",
}


def main():
    print("Running benchmarks for facet...")
    def benchmark(func):
        return min(timeit.repeat(func, repeat=3, number=500))
    context = facet.Context(items=[Item(n) for n in range(100)])
    # Test the cached rendering.
    loader = facet.make_loader(facet.MemorySource(TEMPLATES))
    def render_cached():
        loader.render("items/index", context)
    print("Cached rendering:   {time}".format(time=benchmark(render_cached)))
    # Test the uncached rendering.
    def render_uncached():
        loader.clear_cache()
        loader.render("items/index", context)
    print("Uncached rendering: {time}".format(time=benchmark(render_uncached)))


if __name__ == "__main__":
    main()
