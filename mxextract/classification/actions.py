"""
Variant tables for flow actions, retrieve sources, split conditions and
case values.

``ACTION_TYPES`` is the detail dispatch of action activities. Several rules
list more than one structure type because the platform renamed a few
actions while keeping the old serialized names.
"""

from typing import Any, Dict, List, Tuple

from mxextract.classification.datatypes import DATA_TYPES, project_text
from mxextract.classification.table import (
    UNKNOWN_KIND,
    VariantRule,
    VariantTable,
    short_type_name,
)
from mxextract.resolver import enum_text, flag_of, resolve_ref, text_of


def _items(node: Any) -> List[Dict[str, Any]]:
    return [
        {
            "attribute": resolve_ref(getattr(item, "attribute", None))
            or resolve_ref(getattr(item, "association", None)),
            "type": enum_text(getattr(item, "type", None), "Set"),
            "value": text_of(getattr(item, "value", None)),
        }
        for item in (getattr(node, "items", None) or [])
    ]


def _argument(mapping: Any) -> str:
    argument = getattr(mapping, "argument", None)
    if argument is None:
        argument = getattr(getattr(mapping, "value", None), "argument", None)
    return text_of(argument)


def _parameter_mappings(mappings: Any) -> List[Dict[str, Any]]:
    return [
        {
            "parameter": resolve_ref(getattr(mapping, "parameter", None)),
            "argument": _argument(mapping),
        }
        for mapping in (mappings or [])
    ]


def _template_text(template: Any) -> Any:
    return project_text(getattr(template, "text", None)) if template is not None else None


# =============================================================================
# Retrieve Sources and Ranges
# =============================================================================


def _constant_range(node: Any) -> Dict[str, Any]:
    return {"singleObject": flag_of(node, "single_object", False)}


def _custom_range(node: Any) -> Dict[str, Any]:
    return {
        "limit": text_of(getattr(node, "limit_expression", None)),
        "offset": text_of(getattr(node, "offset_expression", None)),
    }


RANGES = VariantTable(
    "range",
    [
        VariantRule("ConstantRange", ("Microflows$ConstantRange",), _constant_range),
        VariantRule("CustomRange", ("Microflows$CustomRange",), _custom_range),
    ],
)


def _database_source(node: Any) -> Dict[str, Any]:
    return {
        "entity": resolve_ref(getattr(node, "entity", None)),
        "xPathConstraint": text_of(getattr(node, "x_path_constraint", None)),
        "range": RANGES.project_optional(getattr(node, "range", None)),
    }


def _association_source(node: Any) -> Dict[str, Any]:
    return {
        "association": resolve_ref(getattr(node, "association", None)),
        "startPoint": text_of(getattr(node, "start_variable_name", None)),
    }


RETRIEVE_SOURCES = VariantTable(
    "retrieve-source",
    [
        VariantRule("Database", ("Microflows$DatabaseRetrieveSource",), _database_source),
        VariantRule("Association", ("Microflows$AssociationRetrieveSource",), _association_source),
    ],
)


# =============================================================================
# Object Actions
# =============================================================================


def _create_object(node: Any) -> Dict[str, Any]:
    return {
        "entity": resolve_ref(getattr(node, "entity", None)),
        "outputVariable": text_of(getattr(node, "output_variable_name", None)),
        "commit": enum_text(getattr(node, "commit", None), "No"),
        "refreshInClient": flag_of(node, "refresh_in_client", False),
        "changeItems": _items(node),
    }


def _change_object(node: Any) -> Dict[str, Any]:
    return {
        "changeObject": text_of(getattr(node, "change_variable_name", None)),
        "commit": enum_text(getattr(node, "commit", None), "No"),
        "refreshInClient": flag_of(node, "refresh_in_client", False),
        "changeItems": _items(node),
    }


def _retrieve(node: Any) -> Dict[str, Any]:
    details: Dict[str, Any] = {
        "outputVariable": text_of(getattr(node, "output_variable_name", None))
    }
    source = getattr(node, "retrieve_source", None)
    if source is not None:
        kind, fields = RETRIEVE_SOURCES.classify(source)
        details["source"] = kind
        details.update(fields)
    else:
        details["source"] = None
    return details


def _commit(node: Any) -> Dict[str, Any]:
    return {
        "commitObjects": text_of(getattr(node, "commit_variable_name", None)),
        "refreshInClient": flag_of(node, "refresh_in_client", False),
        "withEvents": flag_of(node, "with_events", True),
    }


def _delete(node: Any) -> Dict[str, Any]:
    return {
        "deleteObject": text_of(getattr(node, "delete_variable_name", None)),
        "refreshInClient": flag_of(node, "refresh_in_client", False),
    }


def _rollback(node: Any) -> Dict[str, Any]:
    return {
        "rollbackObject": text_of(getattr(node, "rollback_variable_name", None)),
        "refreshInClient": flag_of(node, "refresh_in_client", False),
    }


def _output_only(node: Any) -> Dict[str, Any]:
    return {"outputVariable": text_of(getattr(node, "output_variable_name", None))}


# =============================================================================
# List and Variable Actions
# =============================================================================


def _aggregate_list(node: Any) -> Dict[str, Any]:
    return {
        "inputList": text_of(getattr(node, "input_list_variable_name", None)),
        "aggregateFunction": enum_text(getattr(node, "aggregate_function", None)),
        "attribute": resolve_ref(getattr(node, "attribute", None)),
        "outputVariable": text_of(getattr(node, "output_variable_name", None)),
    }


def _change_list(node: Any) -> Dict[str, Any]:
    return {
        "changeList": text_of(getattr(node, "change_variable_name", None)),
        "type": enum_text(getattr(node, "type", None)),
        "value": text_of(getattr(node, "value", None)),
    }


def _create_list(node: Any) -> Dict[str, Any]:
    return {
        "entity": resolve_ref(getattr(node, "entity", None)),
        "outputVariable": text_of(getattr(node, "output_variable_name", None)),
    }


def _list_operation(node: Any) -> Dict[str, Any]:
    operation = getattr(node, "operation", None)
    return {
        "operation": short_type_name(operation) if operation is not None else UNKNOWN_KIND,
        "outputVariable": text_of(getattr(node, "output_variable_name", None)),
    }


def _create_variable(node: Any) -> Dict[str, Any]:
    return {
        "variableName": text_of(getattr(node, "variable_name", None)),
        "dataType": DATA_TYPES.project(getattr(node, "variable_type", None)),
        "initialValue": text_of(getattr(node, "initial_value", None)),
    }


def _change_variable(node: Any) -> Dict[str, Any]:
    return {
        "changeVariable": text_of(getattr(node, "change_variable_name", None)),
        "value": text_of(getattr(node, "value", None)),
    }


# =============================================================================
# Call Actions
# =============================================================================


def _microflow_call(node: Any) -> Dict[str, Any]:
    call = getattr(node, "microflow_call", None)
    return {
        "microflow": resolve_ref(getattr(call, "microflow", None)),
        "parameters": _parameter_mappings(getattr(call, "parameter_mappings", None)),
        "useReturnVariable": flag_of(node, "use_return_variable", False),
        "outputVariable": text_of(getattr(node, "output_variable_name", None)),
    }


def _java_action_call(node: Any) -> Dict[str, Any]:
    return {
        "javaAction": resolve_ref(getattr(node, "java_action", None)),
        "parameters": _parameter_mappings(getattr(node, "parameter_mappings", None)),
        "outputVariable": text_of(getattr(node, "output_variable_name", None)),
    }


def _java_script_action_call(node: Any) -> Dict[str, Any]:
    parameters = []
    for mapping in getattr(node, "parameter_mappings", None) or []:
        value = getattr(mapping, "parameter_value", None)
        parameters.append(
            {
                "parameter": resolve_ref(getattr(mapping, "parameter", None)),
                "value": short_type_name(value) if value is not None else UNKNOWN_KIND,
            }
        )
    return {
        "javaScriptAction": resolve_ref(getattr(node, "java_script_action", None)),
        "parameters": parameters,
        "outputVariable": text_of(getattr(node, "output_variable_name", None)),
    }


# =============================================================================
# Client Actions
# =============================================================================


def _show_page(node: Any) -> Dict[str, Any]:
    settings = getattr(node, "page_settings", None)
    return {
        "page": resolve_ref(getattr(settings, "page", None)),
        "passedObject": text_of(getattr(node, "passed_object_variable_name", None)),
    }


def _show_message(node: Any) -> Dict[str, Any]:
    return {
        "messageType": enum_text(getattr(node, "type", None), "Information"),
        "template": _template_text(getattr(node, "template", None)),
        "blocking": flag_of(node, "blocking", True),
    }


def _close_form(node: Any) -> Dict[str, Any]:
    pages = getattr(node, "number_of_pages", None)
    return {"numberOfPages": 1 if pages is None else pages}


def _validation_feedback(node: Any) -> Dict[str, Any]:
    return {
        "variable": text_of(getattr(node, "object_variable_name", None)),
        "attribute": resolve_ref(getattr(node, "attribute", None)),
        "association": resolve_ref(getattr(node, "association", None)),
        "template": _template_text(getattr(node, "feedback_template", None)),
    }


def _download_file(node: Any) -> Dict[str, Any]:
    return {
        "fileDocument": text_of(getattr(node, "file_document_variable_name", None)),
        "showFileInBrowser": flag_of(node, "show_file_in_browser", False),
    }


# =============================================================================
# Integration and Other Actions
# =============================================================================


def _rest_call(node: Any) -> Dict[str, Any]:
    http = getattr(node, "http_configuration", None)
    return {
        "httpConfiguration": "configured" if http is not None else "default",
        "httpMethod": enum_text(getattr(http, "http_method", None)),
        "timeOut": getattr(node, "time_out", None),
        "useRequestTimeOut": flag_of(node, "use_request_time_out", False),
    }


def _web_service_call(node: Any) -> Dict[str, Any]:
    return {
        "httpConfiguration": (
            "configured" if getattr(node, "http_configuration", None) is not None else "default"
        ),
        "timeOut": getattr(node, "time_out", None),
    }


def _log_message(node: Any) -> Dict[str, Any]:
    template = getattr(node, "message_template", None)
    return {
        "logLevel": enum_text(getattr(node, "level", None), "Info"),
        "logNodeName": text_of(getattr(node, "node", None)),
        "messageTemplate": text_of(getattr(template, "text", None)),
        "includeLatestStackTrace": flag_of(node, "include_latest_stack_trace", False),
    }


def _generate_document(node: Any) -> Dict[str, Any]:
    return {
        "documentTemplate": resolve_ref(getattr(node, "document_template", None)),
        "documentType": enum_text(getattr(node, "document_type", None)),
        "fileVariable": text_of(getattr(node, "file_variable_name", None)),
    }


ACTION_TYPES = VariantTable(
    "action",
    [
        # Object actions
        VariantRule(
            "CreateObjectAction",
            ("Microflows$CreateObjectAction", "Microflows$CreateChangeAction"),
            _create_object,
        ),
        VariantRule(
            "ChangeObjectAction",
            ("Microflows$ChangeObjectAction", "Microflows$ChangeAction"),
            _change_object,
        ),
        VariantRule("RetrieveAction", ("Microflows$RetrieveAction",), _retrieve),
        VariantRule("CommitAction", ("Microflows$CommitAction",), _commit),
        VariantRule("DeleteAction", ("Microflows$DeleteAction",), _delete),
        VariantRule("RollbackAction", ("Microflows$RollbackAction",), _rollback),
        VariantRule("CastAction", ("Microflows$CastAction",), _output_only),
        # List actions
        VariantRule("AggregateListAction", ("Microflows$AggregateListAction",), _aggregate_list),
        VariantRule("ChangeListAction", ("Microflows$ChangeListAction",), _change_list),
        VariantRule("CreateListAction", ("Microflows$CreateListAction",), _create_list),
        VariantRule(
            "ListOperationAction",
            ("Microflows$ListOperationAction", "Microflows$ListOperationsAction"),
            _list_operation,
        ),
        # Variable actions
        VariantRule("CreateVariableAction", ("Microflows$CreateVariableAction",), _create_variable),
        VariantRule("ChangeVariableAction", ("Microflows$ChangeVariableAction",), _change_variable),
        # Calls
        VariantRule("MicroflowCallAction", ("Microflows$MicroflowCallAction",), _microflow_call),
        VariantRule("JavaActionCallAction", ("Microflows$JavaActionCallAction",), _java_action_call),
        VariantRule(
            "JavaScriptActionCallAction",
            ("Microflows$JavaScriptActionCallAction",),
            _java_script_action_call,
        ),
        # Client actions
        VariantRule(
            "ShowPageAction", ("Microflows$ShowPageAction", "Microflows$ShowFormAction"), _show_page
        ),
        VariantRule("ShowHomePageAction", ("Microflows$ShowHomePageAction",)),
        VariantRule("ShowMessageAction", ("Microflows$ShowMessageAction",), _show_message),
        VariantRule(
            "CloseFormAction", ("Microflows$CloseFormAction", "Microflows$ClosePageAction"), _close_form
        ),
        VariantRule(
            "ValidationFeedbackAction", ("Microflows$ValidationFeedbackAction",), _validation_feedback
        ),
        VariantRule("DownloadFileAction", ("Microflows$DownloadFileAction",), _download_file),
        # Integration actions
        VariantRule("RestCallAction", ("Microflows$RestCallAction",), _rest_call),
        VariantRule("WebServiceCallAction", ("Microflows$WebServiceCallAction",), _web_service_call),
        # Other actions
        VariantRule("LogMessageAction", ("Microflows$LogMessageAction",), _log_message),
        VariantRule(
            "GenerateDocumentAction", ("Microflows$GenerateDocumentAction",), _generate_document
        ),
    ],
)


def project_action(action: Any) -> Tuple[str, Dict[str, Any]]:
    """
    Return ``(actionType, details)`` for an action.

    Actions outside the table keep their raw type name and get empty
    details.
    """
    kind, fields = ACTION_TYPES.classify(action)
    if kind == UNKNOWN_KIND:
        return short_type_name(action), {}
    return kind, fields


# =============================================================================
# Split Conditions and Case Values
# =============================================================================


def _expression_condition(node: Any) -> Dict[str, Any]:
    return {"expression": text_of(getattr(node, "expression", None))}


def _rule_condition(node: Any) -> Dict[str, Any]:
    call = getattr(node, "rule_call", None)
    return {
        "rule": resolve_ref(getattr(call, "rule", None)),
        "parameters": _parameter_mappings(getattr(call, "parameter_mappings", None)),
    }


SPLIT_CONDITIONS = VariantTable(
    "split-condition",
    [
        VariantRule("Expression", ("Microflows$ExpressionSplitCondition",), _expression_condition),
        VariantRule("Rule", ("Microflows$RuleSplitCondition",), _rule_condition),
    ],
)


def _enumeration_case(node: Any) -> Dict[str, Any]:
    return {"value": text_of(getattr(node, "value", None))}


def _inheritance_case(node: Any) -> Dict[str, Any]:
    return {"value": resolve_ref(getattr(node, "value", None))}


CASE_VALUES = VariantTable(
    "case-value",
    [
        VariantRule("Enumeration", ("Microflows$EnumerationCase",), _enumeration_case),
        VariantRule("Inheritance", ("Microflows$InheritanceCase",), _inheritance_case),
        VariantRule("NoCase", ("Microflows$NoCase",)),
    ],
)
