"""Component actions, each driven by one resolved Metadata record."""

from cirun.actions.base import Action, ActionResult, ComponentAction
from cirun.actions.build import test_unit_then_build
from cirun.actions.checks import (
    audit_runtime,
    lint,
    test_integration_client,
    test_integration_externals,
    test_integration_node,
    test_integration_webpack,
)
from cirun.actions.cleanup import cleanup_npm
from cirun.actions.metadata import metadata_collect, metadata_download
from cirun.actions.verify import verify_release

ACTIONS: dict[ComponentAction, Action] = {
    ComponentAction.AUDIT_RUNTIME: audit_runtime,
    ComponentAction.CLEANUP_NPM: cleanup_npm,
    ComponentAction.LINT: lint,
    ComponentAction.METADATA_COLLECT: metadata_collect,
    ComponentAction.METADATA_DOWNLOAD: metadata_download,
    ComponentAction.TEST_INTEGRATION_CLIENT: test_integration_client,
    ComponentAction.TEST_INTEGRATION_EXTERNALS: test_integration_externals,
    ComponentAction.TEST_INTEGRATION_NODE: test_integration_node,
    ComponentAction.TEST_INTEGRATION_WEBPACK: test_integration_webpack,
    ComponentAction.TEST_UNIT_THEN_BUILD: test_unit_then_build,
    ComponentAction.VERIFY_RELEASE: verify_release,
}

__all__ = ["ACTIONS", "Action", "ActionResult", "ComponentAction"]
