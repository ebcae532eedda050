"""Routing — static route tree, scoring matcher and deferred resolution.

Declarations are compiled into a tree of abstract fragments when the
router is built; every URL is matched against it, resolving deferred
nodes on the way.
"""
