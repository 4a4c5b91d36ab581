"""Queryable semantic model of a protoc ``CodeGeneratorRequest``."""

from protomodel.comments import EMPTY_COMMENTS, Comments
from protomodel.config import ModelSettings, load_model_settings
from protomodel.enums import Enum, EnumValue
from protomodel.errors import DuplicateIdentifierError, ModelBuildError, UnresolvedTypeError
from protomodel.files import File
from protomodel.ingest import RegistryBuilder, build_registry, parse_request
from protomodel.messages import Field, Message, Oneof
from protomodel.meta import Visibility, find_metadata
from protomodel.registry import Registry
from protomodel.services import Method, Service
from protomodel.summary import describe_registry

__all__ = [
    "EMPTY_COMMENTS",
    "Comments",
    "ModelSettings",
    "load_model_settings",
    "Enum",
    "EnumValue",
    "DuplicateIdentifierError",
    "ModelBuildError",
    "UnresolvedTypeError",
    "File",
    "RegistryBuilder",
    "build_registry",
    "parse_request",
    "Field",
    "Message",
    "Oneof",
    "Visibility",
    "find_metadata",
    "Registry",
    "Method",
    "Service",
    "describe_registry",
]
