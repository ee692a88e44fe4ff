import importlib.util
import json
import os

import pulumi
import pytest


class StackMocks(pulumi.runtime.Mocks):
    def new_resource(self, args: pulumi.runtime.MockResourceArgs):
        outputs = dict(args.inputs)
        if args.typ == "aws:s3/bucketV2:BucketV2":
            outputs["arn"] = f"arn:aws:s3:::{args.inputs['bucket']}"
        return [f"{args.name}_id", outputs]

    def call(self, args: pulumi.runtime.MockCallArgs):
        return {}


pulumi.runtime.set_mocks(StackMocks(), preview=False)

PROGRAM_PATH = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "__main__.py")


def example_config_data(enable_versioning=True):
    return {
        "project": "my-app",
        "environment": "dev",
        "region": "us-west-2",
        "storage": {"bucket_name": "data", "enable_versioning": enable_versioning},
    }


@pytest.fixture
def write_config(tmp_path):
    def _write(data, name="config.json"):
        path = tmp_path / name
        if isinstance(data, str):
            path.write_text(data)
        else:
            path.write_text(json.dumps(data))
        return str(path)

    return _write


@pytest.fixture
def program():
    spec = importlib.util.spec_from_file_location("program", PROGRAM_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module
