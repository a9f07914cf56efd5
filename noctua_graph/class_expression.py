"""Class expressions as they appear in Minerva individual "type" fields."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from noctua_graph.exceptions import MalformedExpressionError
from noctua_graph.utils import generate_id

CLASS = "class"
SVF = "svf"
UNION = "union"
INTERSECTION = "intersection"
COMPLEMENT = "complement"

_SET_TYPES = (UNION, INTERSECTION)


class ClassExpression:
    """
    A (possibly nested) OWL class expression.

    ``raw`` may be a Minerva JSON descriptor, a bare class id string, or
    another ClassExpression (which is cloned with its id preserved).
    Every expression parsed from raw data receives a fresh id.
    """

    def __init__(self, raw: Any = None):
        self._id: str = generate_id()
        self._type: Optional[str] = None
        self._class_id: Optional[str] = None
        self._class_label: Optional[str] = None
        self._property_id: Optional[str] = None
        self._property_label: Optional[str] = None
        self._filler: Optional[ClassExpression] = None
        self._expressions: List[ClassExpression] = []
        if raw is not None:
            self.parse(raw)

    def parse(self, raw: Any) -> "ClassExpression":
        if isinstance(raw, ClassExpression):
            self._copy_from(raw)
        elif isinstance(raw, str):
            if not raw.strip():
                raise MalformedExpressionError("empty class id")
            self._type = CLASS
            self._class_id = raw
        elif isinstance(raw, dict):
            self._parse_dict(raw)
        else:
            raise MalformedExpressionError(f"cannot parse class expression from {type(raw).__name__}")
        return self

    def _parse_dict(self, raw: Dict[str, Any]) -> None:
        etype = raw.get("type")
        if etype == CLASS:
            if not raw.get("id"):
                raise MalformedExpressionError(f"class expression without id: {raw!r}")
            self._type = CLASS
            self._class_id = raw["id"]
            self._class_label = raw.get("label")
        elif etype == SVF:
            prop = raw.get("property")
            filler = raw.get("filler")
            if not isinstance(prop, dict) or not prop.get("id") or filler is None:
                raise MalformedExpressionError(f"malformed svf expression: {raw!r}")
            self._type = SVF
            self._property_id = prop["id"]
            self._property_label = prop.get("label")
            self._filler = ClassExpression(filler)
        elif etype in _SET_TYPES:
            members = raw.get("expressions")
            if not isinstance(members, list) or not members:
                raise MalformedExpressionError(f"malformed {etype} expression: {raw!r}")
            self._type = etype
            self._expressions = [ClassExpression(m) for m in members]
        elif etype == COMPLEMENT:
            if raw.get("filler") is None:
                raise MalformedExpressionError(f"complement without filler: {raw!r}")
            self._type = COMPLEMENT
            self._filler = ClassExpression(raw["filler"])
        else:
            raise MalformedExpressionError(f"unknown class expression type: {etype!r}")

    def _copy_from(self, other: "ClassExpression") -> None:
        self._id = other._id
        self._type = other._type
        self._class_id = other._class_id
        self._class_label = other._class_label
        self._property_id = other._property_id
        self._property_label = other._property_label
        self._filler = other._filler.clone() if other._filler is not None else None
        self._expressions = [e.clone() for e in other._expressions]

    @property
    def id(self) -> str:
        return self._id

    @property
    def expression_type(self) -> Optional[str]:
        return self._type

    @property
    def class_id(self) -> Optional[str]:
        return self._class_id

    @property
    def class_label(self) -> Optional[str]:
        return self._class_label

    @property
    def property_id(self) -> Optional[str]:
        return self._property_id

    @property
    def property_label(self) -> Optional[str]:
        return self._property_label

    @property
    def filler(self) -> Optional["ClassExpression"]:
        return self._filler

    @property
    def expressions(self) -> List["ClassExpression"]:
        return list(self._expressions)

    @property
    def category(self) -> Optional[str]:
        """'instance_of' for plain classes, the property id for svf, else the type."""
        if self._type == CLASS:
            return "instance_of"
        if self._type == SVF:
            return self._property_id
        return self._type

    def signature(self) -> str:
        """Label-free structural rendering, stable across ids and member order."""
        if self._type == CLASS:
            return self._class_id or ""
        if self._type == SVF:
            return f"svf({self._property_id},{self._filler.signature()})"
        if self._type in _SET_TYPES:
            members = sorted(e.signature() for e in self._expressions)
            return f"{self._type}({'|'.join(members)})"
        if self._type == COMPLEMENT:
            return f"not({self._filler.signature()})"
        return ""

    def to_string(self) -> str:
        if self._type == CLASS:
            return self._class_id or ""
        if self._type == SVF:
            prop = self._property_label or self._property_id
            return f"{prop} some {self._filler.to_string()}"
        if self._type in _SET_TYPES:
            joiner = " or " if self._type == UNION else " and "
            return "(" + joiner.join(e.to_string() for e in self._expressions) + ")"
        if self._type == COMPLEMENT:
            return f"not {self._filler.to_string()}"
        return ""

    def to_json(self) -> Dict[str, Any]:
        """Render back to the Minerva descriptor shape."""
        if self._type == CLASS:
            out: Dict[str, Any] = {"type": CLASS, "id": self._class_id}
            if self._class_label:
                out["label"] = self._class_label
            return out
        if self._type == SVF:
            prop: Dict[str, Any] = {"type": "property", "id": self._property_id}
            if self._property_label:
                prop["label"] = self._property_label
            return {"type": SVF, "property": prop, "filler": self._filler.to_json()}
        if self._type in _SET_TYPES:
            return {"type": self._type, "expressions": [e.to_json() for e in self._expressions]}
        if self._type == COMPLEMENT:
            return {"type": COMPLEMENT, "filler": self._filler.to_json()}
        return {}

    def clone(self) -> "ClassExpression":
        return ClassExpression(self)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"ClassExpression({self.signature()!r})"
