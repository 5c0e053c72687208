"""Routing: method + path patterns compiled into a segment trie.

Patterns use ``{name}`` placeholders with optional converters
(``{id:int}``, ``{amount:float}``, ``{rest:path}``). The ``{rest...}``
spelling is accepted as an alias for ``{rest:path}``.
"""
