"""
接口定义包
"""

from .inode import INode

__all__ = [
    'INode',
]
