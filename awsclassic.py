import pulumi
import pulumi_aws as aws
from typing import Any, Dict, Mapping, Optional

from declarations import ResourceDeclaration, StackDeclaration

REF_PREFIX = "ref:"


def resolve_value(value: Any, resources: Dict[str, Any]) -> Any:
    if isinstance(value, Mapping):
        return {k: resolve_value(v, resources) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [resolve_value(item, resources) for item in value]
    elif isinstance(value, str) and value.startswith(REF_PREFIX):
        ref_text = value[len(REF_PREFIX):]
        if "." in ref_text:
            ref_res, ref_attr = ref_text.split(".", 1)
        else:
            ref_res, ref_attr = ref_text, "id"
        if ref_res not in resources:
            raise ValueError(f"Referenced resource '{ref_res}' not found.")
        attr_val = getattr(resources[ref_res], ref_attr, None)
        if attr_val is None:
            raise ValueError(f"Attribute '{ref_attr}' not found on resource '{ref_res}'")
        return attr_val
    else:
        return value


class AWSResourceBuilder:
    """Registers a StackDeclaration's resources and outputs with pulumi_aws."""

    def __init__(self, stack: StackDeclaration):
        self.stack = stack
        self.resources: Dict[str, pulumi.CustomResource] = {}
        self.provider: Optional[aws.Provider] = None

    def generate_resource_name(self, logical_id: str) -> str:
        return f"{self.stack.identity}-{logical_id}"

    def resolve_args(self, args: dict) -> dict:
        return {key: resolve_value(value, self.resources) for key, value in args.items()}

    def get_resource_class(self, resource_type: str) -> type:
        module_name, class_name = resource_type.rsplit(".", 1)
        module = getattr(aws, module_name, None)
        if module is None:
            raise ValueError(f"AWS module '{module_name}' not found for '{resource_type}'.")
        resource_class = getattr(module, class_name, None)
        if resource_class is None:
            raise ValueError(f"Resource class '{class_name}' not found in module '{module_name}'.")
        return resource_class

    def create(self, declaration: ResourceDeclaration) -> pulumi.CustomResource:
        if declaration.logical_id in self.resources:
            raise ValueError(f"Duplicate logical id '{declaration.logical_id}' in stack '{self.stack.identity}'.")
        ResourceClass = self.get_resource_class(declaration.type)
        resolved_args = self.resolve_args(declaration.args)
        pulumi_name = self.generate_resource_name(declaration.logical_id)
        resource_instance = ResourceClass(
            pulumi_name,
            **resolved_args,
            opts=pulumi.ResourceOptions(provider=self.provider),
        )
        self.resources[declaration.logical_id] = resource_instance
        pulumi.log.info(f"Created resource: {pulumi_name} ({declaration.type})")
        return resource_instance

    def build(self):
        self.provider = aws.Provider(self.generate_resource_name("aws"), region=self.stack.region)
        for declaration in self.stack.resources:
            self.create(declaration)

    def export(self):
        for binding in self.stack.outputs:
            pulumi.export(binding.name, resolve_value(binding.value, self.resources))
            pulumi.log.info(f"Exported '{binding.name}': {binding.description}")


def synthesize(stack: StackDeclaration, builder_cls=AWSResourceBuilder) -> bool:
    """Hand the declarations to Pulumi. Returns False if any of them could not be registered."""
    try:
        builder = builder_cls(stack)
        builder.build()
        builder.export()
    except Exception as e:
        pulumi.log.error(f"Failed to synthesize stack '{stack.identity}': {e}")
        return False
    return True
