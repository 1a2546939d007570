from typing import Any, Dict
import json
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

class BaseSchema(BaseModel):
	"""
	Base schema class with JSON-safe serialization/deserialization.

	Python attributes are snake_case; the presentation layer receives camelCase
	through the alias generator (`riskLevel`, `lastUpdated`, ...). Either
	spelling is accepted on input.
	"""

	model_config = ConfigDict(
		alias_generator=to_camel,
		populate_by_name=True,
		# model_info / model_confidence are upstream field names
		protected_namespaces=(),
	)

	def to_dict(self) -> Dict[str, Any]:
		"""Convert model to a JSON-compatible dictionary keyed by field name."""
		return json.loads(self.model_dump_json())

	def to_json(self) -> str:
		"""Serialize the schema object to a JSON string for key/value storage."""
		return self.model_dump_json()

	@classmethod
	def from_json(cls, json_str: str) -> "BaseSchema":
		"""Deserialize a JSON string from key/value storage back into a schema object."""
		return cls.model_validate_json(json_str)
