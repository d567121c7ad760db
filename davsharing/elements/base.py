#!/usr/bin/env python
import sys
from collections.abc import Iterable
from typing import ClassVar
from typing import List
from typing import Optional
from typing import Union

from lxml import etree
from lxml.etree import _Element

from davsharing.lib.namespace import clark
from davsharing.lib.namespace import nsmap
from davsharing.lib.python_utilities import to_unicode

if sys.version_info < (3, 11):
    from typing_extensions import Self
else:
    from typing import Self


class BaseElement:
    """
    An XML element, composed into a tree with ``+``:

        Share() + (Set() + Href("principal:alice"))

    Subclasses give the tag in Clark notation.
    """

    tag: ClassVar[Optional[str]] = None

    def __init__(self, value: Union[str, bytes, None] = None) -> None:
        self.children: List[BaseElement] = []
        self.value: Optional[str] = to_unicode(value)

    def __add__(self, other: Union["BaseElement", Iterable["BaseElement"]]) -> Self:
        if isinstance(other, Iterable):
            self.children.extend(other)
        else:
            self.children.append(other)
        return self

    def __str__(self) -> str:
        return etree.tostring(
            self.xmlelement(), encoding="utf-8", xml_declaration=True, pretty_print=True
        ).decode("utf-8")

    def __repr__(self) -> str:
        return "%s(%s)" % (self.__class__.__name__, self.tag)

    def xmlelement(self) -> _Element:
        if self.tag is None:
            raise ValueError("Unexpected value None for self.tag")
        root = etree.Element(self.tag, nsmap=nsmap)
        if self.value is not None:
            root.text = self.value
        for child in self.children:
            root.append(child.xmlelement())
        return root


class ValuedBaseElement(BaseElement):
    """An element carrying text, i.e. <d:href>...</d:href>"""


class PropName(BaseElement):
    """
    An empty property element for a [namespace, name] pair, used when
    the property list for a PROPFIND is given as plain pairs rather
    than element classes.
    """

    def __init__(self, namespace: str, name: str) -> None:
        super(PropName, self).__init__()
        self.tag = clark(namespace, name)
