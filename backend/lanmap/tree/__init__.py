"""Tree reconstruction components."""

from .builder import TreeNode, build_tree, iter_tree

__all__ = ["TreeNode", "build_tree", "iter_tree"]
