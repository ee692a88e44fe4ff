import os
import sys

import pulumi
from awsclassic import synthesize
from config import ConfigError, config_file_path, load_config
from declarations import VERSIONING_TYPE, declare_stack

PROGRAM_DIR = os.path.dirname(os.path.abspath(__file__))


def main():
    file_path = config_file_path(PROGRAM_DIR)
    pulumi.log.info(f"Reading {file_path}...")
    try:
        config = load_config(file_path)
    except ConfigError as e:
        pulumi.log.error(f"Failed to load configuration: {e}")
        raise

    pulumi.log.info(f"Config loaded for project: {config.project} (environment: {config.environment})")

    stack = declare_stack(config)
    if stack.of_type(VERSIONING_TYPE):
        pulumi.log.info("S3 Bucket with versioning enabled")
    else:
        pulumi.log.info("S3 Bucket (no versioning)")

    if not synthesize(stack):
        sys.exit(1)

    pulumi.log.info(f"Declared stack '{stack.identity}'. Review with 'pulumi preview', deploy with 'pulumi up'.")


if __name__ == "__main__":
    main()
