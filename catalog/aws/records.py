from typing import Any, Dict, List, Optional
import json
import uuid
from decimal import Decimal
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError
import structlog

from ..core.errors import ProductNotFound, RecordNotFound
from .clients import products_table, tags_table

"""DynamoDB-backed record stores for products and tags.

Filters follow the loopback shape the API exposes:
``{"where": {"field": value}, "limit": n, "skip": n, "order": "field DESC"}``.
A ``where`` value may be a plain value (equality) or an operator object such
as ``{"gt": 1}``; ``and`` / ``or`` take lists of nested ``where`` objects.
"""

logger = structlog.get_logger()


def _reject_constant(name: str):
    raise ValueError("non_finite_number")


def _to_dynamo(value: Any) -> Any:
    # DynamoDB rejects floats; round-trip through JSON to get Decimals
    return json.loads(json.dumps(value), parse_float=Decimal, parse_constant=_reject_constant)


def _to_item(data: Dict[str, Any]) -> Dict[str, Any]:
    return _to_dynamo(data)


def _from_item(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: _from_item(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_from_item(v) for v in value]
    return value


def _operator_cond(field: str, op: str, value: Any):
    attr = Attr(field)
    if op == "eq":
        return attr.eq(_to_dynamo(value))
    if op == "neq":
        return attr.ne(_to_dynamo(value))
    if op in ("gt", "gte", "lt", "lte"):
        return getattr(attr, op)(_to_dynamo(value))
    if op in ("inq", "nin"):
        if not isinstance(value, list) or not value:
            raise ValueError(f"{op}_requires_list")
        cond = attr.is_in(_to_dynamo(value))
        return cond if op == "inq" else ~cond
    if op == "between":
        if not isinstance(value, list) or len(value) != 2:
            raise ValueError("between_requires_two_values")
        low, high = _to_dynamo(value)
        return attr.between(low, high)
    if op == "exists":
        return attr.exists() if value else attr.not_exists()
    raise ValueError("unsupported_where_operator")


def _combine(conds, joiner):
    expr = None
    for cond in conds:
        if cond is not None:
            expr = cond if expr is None else joiner(expr, cond)
    return expr


def _where_expr(where: Optional[Dict[str, Any]]):
    if where is not None and not isinstance(where, dict):
        raise ValueError("where_must_be_object")
    conds = []
    for field, value in (where or {}).items():
        if field in ("and", "or"):
            if not isinstance(value, list):
                raise ValueError(f"{field}_requires_list")
            nested = [_where_expr(w) for w in value]
            if field == "and":
                conds.append(_combine(nested, lambda a, b: a & b))
            else:
                conds.append(_combine(nested, lambda a, b: a | b))
        elif isinstance(value, dict):
            if not value:
                raise ValueError("unsupported_where_operator")
            conds.extend(_operator_cond(field, op, v) for op, v in value.items())
        else:
            conds.append(Attr(field).eq(_to_dynamo(value)))
    return _combine(conds, lambda a, b: a & b)


def _sort(items: List[Dict[str, Any]], order) -> List[Dict[str, Any]]:
    if not order:
        return items
    clauses = [order] if isinstance(order, str) else order
    if not isinstance(clauses, list) or not all(isinstance(c, str) and c.split() for c in clauses):
        raise ValueError("invalid_order")
    # Apply the least significant clause first; sorted() is stable
    for clause in reversed(clauses):
        parts = clause.split()
        field = parts[0]
        descending = len(parts) > 1 and parts[1].upper() == "DESC"
        present = [i for i in items if i.get(field) is not None]
        missing = [i for i in items if i.get(field) is None]
        try:
            present.sort(key=lambda i: i[field], reverse=descending)
        except TypeError:
            raise ValueError("unsupported_order_field")
        items = present + missing
    return items


def _is_conditional_failure(err: ClientError) -> bool:
    return err.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


class DynamoRepository:
    """Generic CRUD over a DynamoDB table keyed by a string ``id``."""

    def __init__(self, table):
        self.table = table

    @property
    def name(self) -> str:
        return self.table.name

    def _not_found(self, record_id: str) -> KeyError:
        return RecordNotFound(self.name, record_id)

    def _scan(self, where: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        filter_expr = _where_expr(where)
        items: List[Dict[str, Any]] = []
        exclusive_start_key = None
        while True:
            params: Dict[str, Any] = {}
            if filter_expr is not None:
                params["FilterExpression"] = filter_expr
            if exclusive_start_key is not None:
                params["ExclusiveStartKey"] = exclusive_start_key

            resp = self.table.scan(**params)
            items.extend(resp.get("Items", []))
            exclusive_start_key = resp.get("LastEvaluatedKey")
            if not exclusive_start_key:
                break
        return [_from_item(i) for i in items]

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        item = dict(data)
        item["id"] = uuid.uuid4().hex
        self.table.put_item(Item=_to_item(item))
        logger.info("record created", table=self.name, record_id=item["id"])
        return item

    def find(self, filter: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        filter = filter or {}
        items = _sort(self._scan(filter.get("where")), filter.get("order"))
        skip = int(filter.get("skip") or filter.get("offset") or 0)
        items = items[skip:]
        if filter.get("limit") is not None:
            items = items[: int(filter["limit"])]
        return items

    def count(self, where: Optional[Dict[str, Any]] = None) -> int:
        return len(self._scan(where))

    def find_by_id(self, record_id: str) -> Dict[str, Any]:
        item = self.table.get_item(Key={"id": record_id}).get("Item")
        if not item:
            raise self._not_found(record_id)
        return _from_item(item)

    def update_all(self, data: Dict[str, Any], where: Optional[Dict[str, Any]] = None) -> int:
        """Merge `data` into every record matching `where`; return how many."""
        matched = self._scan(where)
        for item in matched:
            record_id = item["id"]
            item.update(data)
            item["id"] = record_id
            self.table.put_item(Item=_to_item(item))
        return len(matched)

    def update_by_id(self, record_id: str, data: Dict[str, Any]) -> None:
        item = self.find_by_id(record_id)
        item.update(data)
        item["id"] = record_id
        self._put_existing(item)

    def replace_by_id(self, record_id: str, data: Dict[str, Any]) -> None:
        item = dict(data)
        item["id"] = record_id
        self._put_existing(item)

    def update(self, entity: Dict[str, Any]) -> None:
        """Persist a record previously loaded with `find_by_id`."""
        self._put_existing(dict(entity))

    def delete_by_id(self, record_id: str) -> None:
        try:
            self.table.delete_item(
                Key={"id": record_id},
                ConditionExpression=Attr("id").exists(),
            )
        except ClientError as e:
            if _is_conditional_failure(e):
                raise self._not_found(record_id) from e
            raise
        logger.info("record deleted", table=self.name, record_id=record_id)

    def _put_existing(self, item: Dict[str, Any]) -> None:
        try:
            self.table.put_item(
                Item=_to_item(item),
                ConditionExpression=Attr("id").exists(),
            )
        except ClientError as e:
            if _is_conditional_failure(e):
                raise self._not_found(item["id"]) from e
            raise


class ProductRepository(DynamoRepository):
    def _not_found(self, record_id: str) -> KeyError:
        return ProductNotFound(record_id)


class TagRepository(DynamoRepository):
    pass


def product_repository() -> ProductRepository:
    return ProductRepository(products_table())


def tag_repository() -> TagRepository:
    return TagRepository(tags_table())
