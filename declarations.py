"""
Maps a Config onto the resource declarations of one stack.

Declarations are plain data: a logical id, a pulumi_aws resource type path
and the keyword arguments for that resource. Values of the form
"ref:<logical_id>.<attribute>" bind to another declaration's resource once
it exists; awsclassic resolves them during the handoff.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from config import Config

MANAGED_BY = "Pulumi-JSON-Platform"
NAME_SEPARATOR = "-"

BUCKET_ID = "bucket"
VERSIONING_ID = "versioning"
BUCKET_TYPE = "s3.BucketV2"
VERSIONING_TYPE = "s3.BucketVersioningV2"
VERSIONING_ENABLED = "Enabled"


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    return value


def ref(logical_id: str, attribute: str) -> str:
    return f"ref:{logical_id}.{attribute}"


@dataclass(frozen=True)
class ResourceDeclaration:
    logical_id: str
    type: str
    args: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        # read-only all the way down, tags included
        object.__setattr__(self, "args", _freeze(self.args))


@dataclass(frozen=True)
class OutputBinding:
    name: str
    value: str
    description: str


@dataclass(frozen=True)
class StackDeclaration:
    identity: str
    region: str
    resources: Tuple[ResourceDeclaration, ...] = ()
    outputs: Tuple[OutputBinding, ...] = ()

    def find(self, logical_id: str) -> Optional[ResourceDeclaration]:
        for declaration in self.resources:
            if declaration.logical_id == logical_id:
                return declaration
        return None

    def of_type(self, resource_type: str) -> List[ResourceDeclaration]:
        return [d for d in self.resources if d.type == resource_type]


def stack_identity(config: Config) -> str:
    return NAME_SEPARATOR.join([config.project, config.environment, "stack"])


def bucket_resource_name(config: Config) -> str:
    # Unique by convention only; nothing checks for an existing bucket.
    return NAME_SEPARATOR.join([config.project, config.environment, config.storage.bucket_name])


def bucket_tags(config: Config) -> Dict[str, str]:
    return {
        "Project": config.project,
        "Environment": config.environment,
        "ManagedBy": MANAGED_BY,
    }


def declare_stack(config: Config) -> StackDeclaration:
    """Derive the stack identity, resource declarations and outputs for a config."""
    resources = [
        ResourceDeclaration(
            logical_id=BUCKET_ID,
            type=BUCKET_TYPE,
            args={
                "bucket": bucket_resource_name(config),
                "tags": bucket_tags(config),
            },
        )
    ]

    if config.storage.enable_versioning:
        resources.append(
            ResourceDeclaration(
                logical_id=VERSIONING_ID,
                type=VERSIONING_TYPE,
                args={
                    "bucket": ref(BUCKET_ID, "bucket"),
                    "versioning_configuration": {"status": VERSIONING_ENABLED},
                },
            )
        )

    outputs = (
        OutputBinding("bucket_name", ref(BUCKET_ID, "bucket"), "The name of the created S3 bucket"),
        OutputBinding("bucket_arn", ref(BUCKET_ID, "arn"), "The ARN of the created S3 bucket"),
    )

    return StackDeclaration(
        identity=stack_identity(config),
        region=config.region,
        resources=tuple(resources),
        outputs=outputs,
    )
