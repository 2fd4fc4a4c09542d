"""Catalog of Autotask tools.

Each ``ToolDefinition`` pairs a JSON input schema with a coroutine that runs
the tool against an ``AutotaskClient`` and returns ``(result, message)``. The
catalog is a flat table; dispatch, argument checking and envelope formatting
live in ``tool_handler``.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any

from autotask_mcp.api_helpers.autotask_client import (
    AutotaskClient,
    any_of,
    contains,
    eq,
)
from autotask_mcp.exceptions import AutotaskNotFoundError

ToolRun = Callable[[AutotaskClient, dict[str, Any]], Awaitable[tuple[Any, str]]]

DEFAULT_PAGE_SIZE = 50

# Fields kept by get_ticket_details unless fullDetails is requested.
TICKET_SUMMARY_FIELDS = (
    "id",
    "ticketNumber",
    "title",
    "description",
    "status",
    "priority",
    "companyID",
    "contactID",
    "assignedResourceID",
    "createDate",
    "lastActivityDate",
    "dueDateTime",
    "completedDate",
    "estimatedHours",
    "queueID",
    "ticketType",
)


@dataclass(frozen=True, slots=True)
class ToolDefinition:
    name: str
    description: str
    input_schema: dict[str, Any]
    run: ToolRun

    @property
    def required(self) -> list[str]:
        return list(self.input_schema.get("required", []))

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


# ----------------------------------------------------------------------
# Schema helpers
# ----------------------------------------------------------------------


def _schema(
    properties: dict[str, dict[str, Any]], required: Iterable[str] = ()
) -> dict[str, Any]:
    return {"type": "object", "properties": properties, "required": list(required)}


def _num(description: str) -> dict[str, Any]:
    return {"type": "number", "description": description}


def _str(description: str) -> dict[str, Any]:
    return {"type": "string", "description": description}


def _bool(description: str) -> dict[str, Any]:
    return {"type": "boolean", "description": description}


PAGE_SIZE = {
    "type": "number",
    "description": f"Number of results to return (default: {DEFAULT_PAGE_SIZE}, max: 500)",
    "minimum": 1,
    "maximum": 500,
}
SEARCH_TERM = _str("Search term")


# ----------------------------------------------------------------------
# Tool body factories
# ----------------------------------------------------------------------


def _payload(
    args: dict[str, Any], fields: Iterable[str], rename: dict[str, str] | None = None
) -> dict[str, Any]:
    rename = rename or {}
    return {
        rename.get(arg, arg): args[arg]
        for arg in fields
        if args.get(arg) is not None
    }


def _page_size(args: dict[str, Any]) -> int:
    return int(args.get("pageSize") or DEFAULT_PAGE_SIZE)


def _search(
    entity: str,
    noun: str,
    *,
    term_fields: tuple[str, ...] = (),
    equals: dict[str, str] | None = None,
) -> ToolRun:
    """Query ``entity`` with a searchTerm over ``term_fields`` and equality filters.

    ``equals`` maps argument names to entity field names.
    """

    async def run(client: AutotaskClient, args: dict[str, Any]) -> tuple[Any, str]:
        filters: list[dict[str, Any]] = []
        term = args.get("searchTerm")
        if term and term_fields:
            term_filters = [contains(field, term) for field in term_fields]
            filters.append(
                term_filters[0] if len(term_filters) == 1 else any_of(*term_filters)
            )
        for arg, field in (equals or {}).items():
            if args.get(arg) is not None:
                filters.append(eq(field, args[arg]))
        result = await client.query(entity, filters, page_size=_page_size(args))
        return result, f"Found {len(result)} {noun}"

    return run


def _get(entity: str, id_arg: str, label: str) -> ToolRun:
    async def run(client: AutotaskClient, args: dict[str, Any]) -> tuple[Any, str]:
        result = await client.get(entity, args[id_arg])
        if result is None:
            raise AutotaskNotFoundError(f"{label} {args[id_arg]} not found")
        return result, f"{label} retrieved successfully"

    return run


def _get_child(
    parent: str, parent_arg: str, child: str, child_arg: str, label: str
) -> ToolRun:
    async def run(client: AutotaskClient, args: dict[str, Any]) -> tuple[Any, str]:
        result = await client.get_child(parent, args[parent_arg], child, args[child_arg])
        if result is None:
            raise AutotaskNotFoundError(f"{label} {args[child_arg]} not found")
        return result, f"{label} retrieved successfully"

    return run


def _create(
    entity: str,
    noun: str,
    fields: Iterable[str],
    *,
    rename: dict[str, str] | None = None,
    parent: tuple[str, str] | None = None,
) -> ToolRun:
    """Create an ``entity`` record, optionally under ``(parent_entity, parent_arg)``."""
    fields = tuple(fields)

    async def run(client: AutotaskClient, args: dict[str, Any]) -> tuple[Any, str]:
        payload = _payload(args, fields, rename)
        if parent is None:
            item_id = await client.create(entity, payload)
        else:
            parent_entity, parent_arg = parent
            item_id = await client.create_child(
                parent_entity, args[parent_arg], entity, payload
            )
        return item_id, f"Successfully created {noun} with ID: {item_id}"

    return run


# ----------------------------------------------------------------------
# Tools with bespoke bodies
# ----------------------------------------------------------------------


async def _test_connection(
    client: AutotaskClient, args: dict[str, Any]
) -> tuple[Any, str]:
    connected = await client.test_connection()
    message = (
        "Successfully connected to Autotask API"
        if connected
        else "Connection failed: Unable to connect to Autotask API"
    )
    return {"success": connected}, message


async def _update_company(
    client: AutotaskClient, args: dict[str, Any]
) -> tuple[Any, str]:
    payload = {key: value for key, value in args.items() if value is not None}
    item_id = await client.update("Companies", payload)
    return item_id, f"Successfully updated company ID: {args['id']}"


async def _search_tickets(
    client: AutotaskClient, args: dict[str, Any]
) -> tuple[Any, str]:
    filters: list[dict[str, Any]] = []
    if term := args.get("searchTerm"):
        filters.append(any_of(contains("title", term), contains("ticketNumber", term)))
    for field in ("companyID", "status", "assignedResourceID"):
        if args.get(field) is not None:
            filters.append(eq(field, args[field]))
    if args.get("unassigned"):
        filters.append({"op": "notExist", "field": "assignedResourceID"})
    result = await client.query("Tickets", filters, page_size=_page_size(args))
    return result, f"Found {len(result)} tickets"


async def _get_ticket_details(
    client: AutotaskClient, args: dict[str, Any]
) -> tuple[Any, str]:
    ticket = await client.get("Tickets", args["ticketID"])
    if ticket is None:
        raise AutotaskNotFoundError(f"Ticket {args['ticketID']} not found")
    if not args.get("fullDetails"):
        ticket = {k: v for k, v in ticket.items() if k in TICKET_SUMMARY_FIELDS}
    return ticket, "Ticket details retrieved successfully"


async def _search_resources(
    client: AutotaskClient, args: dict[str, Any]
) -> tuple[Any, str]:
    result = await client.search_resources(
        search_term=args.get("searchTerm"),
        is_active=args.get("isActive"),
        resource_type=args.get("resourceType"),
        page_size=_page_size(args),
    )
    return result, f"Found {len(result)} resources"


async def _get_ticket_attachment(
    client: AutotaskClient, args: dict[str, Any]
) -> tuple[Any, str]:
    attachment = await client.get_child(
        "Tickets", args["ticketId"], "Attachments", args["attachmentId"]
    )
    if attachment is None:
        raise AutotaskNotFoundError(f"Attachment {args['attachmentId']} not found")
    if not args.get("includeData"):
        attachment = {k: v for k, v in attachment.items() if k != "data"}
    return attachment, "Ticket attachment retrieved successfully"


# ----------------------------------------------------------------------
# The catalog
# ----------------------------------------------------------------------

TOOL_DEFINITIONS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        "test_connection",
        "Test the connection to Autotask API",
        _schema({}),
        _test_connection,
    ),
    # Companies
    ToolDefinition(
        "search_companies",
        "Search for companies in Autotask with optional filters",
        _schema(
            {
                "searchTerm": _str("Search term for company name"),
                "isActive": _bool("Filter by active status"),
                "pageSize": PAGE_SIZE,
            }
        ),
        _search(
            "Companies",
            "companies",
            term_fields=("companyName",),
            equals={"isActive": "isActive"},
        ),
    ),
    ToolDefinition(
        "create_company",
        "Create a new company in Autotask",
        _schema(
            {
                "companyName": _str("Company name"),
                "companyType": _num("Company type ID"),
                "phone": _str("Company phone number"),
                "address1": _str("Company address line 1"),
                "city": _str("Company city"),
                "state": _str("Company state/province"),
                "postalCode": _str("Company postal/ZIP code"),
                "ownerResourceID": _num("Owner resource ID"),
                "isActive": _bool("Whether the company is active"),
            },
            ["companyName", "companyType"],
        ),
        _create(
            "Companies",
            "company",
            (
                "companyName",
                "companyType",
                "phone",
                "address1",
                "city",
                "state",
                "postalCode",
                "ownerResourceID",
                "isActive",
            ),
        ),
    ),
    ToolDefinition(
        "update_company",
        "Update an existing company in Autotask",
        _schema(
            {
                "id": _num("Company ID to update"),
                "companyName": _str("Company name"),
                "phone": _str("Company phone number"),
                "address1": _str("Company address line 1"),
                "city": _str("Company city"),
                "state": _str("Company state/province"),
                "postalCode": _str("Company postal/ZIP code"),
                "isActive": _bool("Whether the company is active"),
            },
            ["id"],
        ),
        _update_company,
    ),
    # Contacts
    ToolDefinition(
        "search_contacts",
        "Search for contacts in Autotask with optional filters",
        _schema(
            {
                "searchTerm": _str("Search term for contact name or email"),
                "companyID": _num("Filter by company ID"),
                "isActive": _num("Filter by active status (1 = active, 0 = inactive)"),
                "pageSize": PAGE_SIZE,
            }
        ),
        _search(
            "Contacts",
            "contacts",
            term_fields=("firstName", "lastName", "emailAddress"),
            equals={"companyID": "companyID", "isActive": "isActive"},
        ),
    ),
    ToolDefinition(
        "create_contact",
        "Create a new contact in Autotask",
        _schema(
            {
                "companyID": _num("Company ID for the contact"),
                "firstName": _str("Contact first name"),
                "lastName": _str("Contact last name"),
                "emailAddress": _str("Contact email address"),
                "phone": _str("Contact phone number"),
                "title": _str("Contact job title"),
            },
            ["companyID", "firstName", "lastName"],
        ),
        _create(
            "Contacts",
            "contact",
            ("companyID", "firstName", "lastName", "emailAddress", "phone", "title"),
            parent=("Companies", "companyID"),
        ),
    ),
    # Tickets
    ToolDefinition(
        "search_tickets",
        "Search for tickets in Autotask with optional filters",
        _schema(
            {
                "searchTerm": _str("Search term for ticket title or number"),
                "companyID": _num("Filter by company ID"),
                "status": _num("Filter by ticket status ID"),
                "assignedResourceID": _num("Filter by assigned resource ID"),
                "unassigned": _bool("Only return tickets without an assigned resource"),
                "pageSize": PAGE_SIZE,
            }
        ),
        _search_tickets,
    ),
    ToolDefinition(
        "get_ticket_details",
        "Get detailed information for a specific ticket by ID",
        _schema(
            {
                "ticketID": _num("Ticket ID to retrieve"),
                "fullDetails": _bool("Return every ticket field instead of a summary"),
            },
            ["ticketID"],
        ),
        _get_ticket_details,
    ),
    ToolDefinition(
        "create_ticket",
        "Create a new ticket in Autotask",
        _schema(
            {
                "companyID": _num("Company ID for the ticket"),
                "title": _str("Ticket title"),
                "description": _str("Ticket description"),
                "status": _num("Ticket status ID"),
                "priority": _num("Ticket priority ID"),
                "assignedResourceID": _num("Assigned resource ID"),
                "contactID": _num("Contact ID for the ticket"),
            },
            ["companyID", "title", "description"],
        ),
        _create(
            "Tickets",
            "ticket",
            (
                "companyID",
                "title",
                "description",
                "status",
                "priority",
                "assignedResourceID",
                "contactID",
            ),
        ),
    ),
    ToolDefinition(
        "create_time_entry",
        "Create a time entry in Autotask",
        _schema(
            {
                "ticketID": _num("Ticket ID for the time entry"),
                "taskID": _num("Task ID for the time entry"),
                "resourceID": _num("Resource ID logging the time"),
                "dateWorked": _str("Date worked (YYYY-MM-DD)"),
                "startDateTime": _str("Start date/time (ISO format)"),
                "endDateTime": _str("End date/time (ISO format)"),
                "hoursWorked": _num("Hours worked"),
                "summaryNotes": _str("Summary notes"),
                "internalNotes": _str("Internal notes"),
            },
            ["resourceID", "dateWorked", "hoursWorked", "summaryNotes"],
        ),
        _create(
            "TimeEntries",
            "time entry",
            (
                "ticketID",
                "taskID",
                "resourceID",
                "dateWorked",
                "startDateTime",
                "endDateTime",
                "hoursWorked",
                "summaryNotes",
                "internalNotes",
            ),
        ),
    ),
    # Projects
    ToolDefinition(
        "search_projects",
        "Search for projects in Autotask with optional filters",
        _schema(
            {
                "searchTerm": _str("Search term for project name"),
                "companyID": _num("Filter by company ID"),
                "status": _num("Filter by project status ID"),
                "projectManagerResourceID": _num("Filter by project manager resource ID"),
                "pageSize": PAGE_SIZE,
            }
        ),
        _search(
            "Projects",
            "projects",
            term_fields=("projectName",),
            equals={
                "companyID": "companyID",
                "status": "status",
                "projectManagerResourceID": "projectManagerResourceID",
            },
        ),
    ),
    ToolDefinition(
        "create_project",
        "Create a new project in Autotask",
        _schema(
            {
                "companyID": _num("Company ID for the project"),
                "projectName": _str("Project name"),
                "description": _str("Project description"),
                "status": _num("Project status ID"),
                "startDate": _str("Project start date (YYYY-MM-DD)"),
                "endDate": _str("Project end date (YYYY-MM-DD)"),
                "projectManagerResourceID": _num("Project manager resource ID"),
                "estimatedHours": _num("Estimated hours"),
            },
            ["companyID", "projectName", "status"],
        ),
        _create(
            "Projects",
            "project",
            (
                "companyID",
                "projectName",
                "description",
                "status",
                "startDate",
                "endDate",
                "projectManagerResourceID",
                "estimatedHours",
            ),
            rename={"startDate": "startDateTime", "endDate": "endDateTime"},
        ),
    ),
    # Resources
    ToolDefinition(
        "search_resources",
        "Search for resources (users) in Autotask with optional filters",
        _schema(
            {
                "searchTerm": _str("Search term for resource name or email"),
                "isActive": _bool("Filter by active status"),
                "resourceType": _num("Filter by resource type"),
                "pageSize": PAGE_SIZE,
            }
        ),
        _search_resources,
    ),
    # Configuration items, contracts, invoices
    ToolDefinition(
        "search_configuration_items",
        "Search for configuration items in Autotask with optional filters",
        _schema(
            {
                "searchTerm": _str("Search term for configuration item name"),
                "companyID": _num("Filter by company ID"),
                "isActive": _bool("Filter by active status"),
                "productID": _num("Filter by product ID"),
                "pageSize": PAGE_SIZE,
            }
        ),
        _search(
            "ConfigurationItems",
            "configuration items",
            term_fields=("referenceTitle",),
            equals={
                "companyID": "companyID",
                "isActive": "isActive",
                "productID": "productID",
            },
        ),
    ),
    ToolDefinition(
        "search_contracts",
        "Search for contracts in Autotask with optional filters",
        _schema(
            {
                "searchTerm": _str("Search term for contract name"),
                "companyID": _num("Filter by company ID"),
                "status": _num("Filter by contract status"),
                "pageSize": PAGE_SIZE,
            }
        ),
        _search(
            "Contracts",
            "contracts",
            term_fields=("contractName",),
            equals={"companyID": "companyID", "status": "status"},
        ),
    ),
    ToolDefinition(
        "search_invoices",
        "Search for invoices in Autotask with optional filters",
        _schema(
            {
                "companyID": _num("Filter by company ID"),
                "invoiceNumber": _str("Filter by invoice number"),
                "isVoided": _bool("Filter by voided status"),
                "pageSize": PAGE_SIZE,
            }
        ),
        _search(
            "Invoices",
            "invoices",
            equals={
                "companyID": "companyID",
                "invoiceNumber": "invoiceNumber",
                "isVoided": "isVoided",
            },
        ),
    ),
    # Tasks
    ToolDefinition(
        "search_tasks",
        "Search for project tasks in Autotask with optional filters",
        _schema(
            {
                "searchTerm": _str("Search term for task title"),
                "projectID": _num("Filter by project ID"),
                "status": _num("Filter by task status ID"),
                "assignedResourceID": _num("Filter by assigned resource ID"),
                "pageSize": PAGE_SIZE,
            }
        ),
        _search(
            "Tasks",
            "tasks",
            term_fields=("title",),
            equals={
                "projectID": "projectID",
                "status": "status",
                "assignedResourceID": "assignedResourceID",
            },
        ),
    ),
    ToolDefinition(
        "create_task",
        "Create a new task in an Autotask project",
        _schema(
            {
                "projectID": _num("Project ID for the task"),
                "title": _str("Task title"),
                "description": _str("Task description"),
                "status": _num("Task status ID"),
                "assignedResourceID": _num("Assigned resource ID"),
                "estimatedHours": _num("Estimated hours"),
                "startDateTime": _str("Start date/time (ISO format)"),
                "endDateTime": _str("End date/time (ISO format)"),
            },
            ["projectID", "title", "status"],
        ),
        _create(
            "Tasks",
            "task",
            (
                "title",
                "description",
                "status",
                "assignedResourceID",
                "estimatedHours",
                "startDateTime",
                "endDateTime",
            ),
            parent=("Projects", "projectID"),
        ),
    ),
    # Ticket notes
    ToolDefinition(
        "get_ticket_note",
        "Get a specific ticket note by ticket ID and note ID",
        _schema(
            {"ticketId": _num("Ticket ID"), "noteId": _num("Note ID")},
            ["ticketId", "noteId"],
        ),
        _get_child("Tickets", "ticketId", "Notes", "noteId", "Ticket note"),
    ),
    ToolDefinition(
        "search_ticket_notes",
        "Search for notes on a specific ticket",
        _schema({"ticketId": _num("Ticket ID"), "pageSize": PAGE_SIZE}, ["ticketId"]),
        _search("TicketNotes", "ticket notes", equals={"ticketId": "ticketID"}),
    ),
    ToolDefinition(
        "create_ticket_note",
        "Create a new note for a ticket",
        _schema(
            {
                "ticketId": _num("Ticket ID"),
                "title": _str("Note title"),
                "description": _str("Note content"),
                "noteType": _num("Note type ID"),
                "publish": _num("Publish level (1 = all users, 2 = internal only)"),
            },
            ["ticketId", "description"],
        ),
        _create(
            "Notes",
            "ticket note",
            ("title", "description", "noteType", "publish"),
            parent=("Tickets", "ticketId"),
        ),
    ),
    # Project notes
    ToolDefinition(
        "get_project_note",
        "Get a specific project note by project ID and note ID",
        _schema(
            {"projectId": _num("Project ID"), "noteId": _num("Note ID")},
            ["projectId", "noteId"],
        ),
        _get_child("Projects", "projectId", "Notes", "noteId", "Project note"),
    ),
    ToolDefinition(
        "search_project_notes",
        "Search for notes on a specific project",
        _schema(
            {"projectId": _num("Project ID"), "pageSize": PAGE_SIZE}, ["projectId"]
        ),
        _search("ProjectNotes", "project notes", equals={"projectId": "projectID"}),
    ),
    ToolDefinition(
        "create_project_note",
        "Create a new note for a project",
        _schema(
            {
                "projectId": _num("Project ID"),
                "title": _str("Note title"),
                "description": _str("Note content"),
                "noteType": _num("Note type ID"),
            },
            ["projectId", "description"],
        ),
        _create(
            "Notes",
            "project note",
            ("title", "description", "noteType"),
            parent=("Projects", "projectId"),
        ),
    ),
    # Company notes
    ToolDefinition(
        "get_company_note",
        "Get a specific company note by company ID and note ID",
        _schema(
            {"companyId": _num("Company ID"), "noteId": _num("Note ID")},
            ["companyId", "noteId"],
        ),
        _get_child("Companies", "companyId", "Notes", "noteId", "Company note"),
    ),
    ToolDefinition(
        "search_company_notes",
        "Search for notes on a specific company",
        _schema(
            {"companyId": _num("Company ID"), "pageSize": PAGE_SIZE}, ["companyId"]
        ),
        _search("CompanyNotes", "company notes", equals={"companyId": "companyID"}),
    ),
    ToolDefinition(
        "create_company_note",
        "Create a new note for a company",
        _schema(
            {
                "companyId": _num("Company ID"),
                "title": _str("Note title"),
                "description": _str("Note content"),
                "actionType": _num("Action type ID"),
            },
            ["companyId", "description"],
        ),
        _create(
            "Notes",
            "company note",
            ("title", "description", "actionType"),
            parent=("Companies", "companyId"),
        ),
    ),
    # Ticket attachments
    ToolDefinition(
        "get_ticket_attachment",
        "Get a specific ticket attachment by ticket ID and attachment ID",
        _schema(
            {
                "ticketId": _num("Ticket ID"),
                "attachmentId": _num("Attachment ID"),
                "includeData": _bool("Include the base64 file content"),
            },
            ["ticketId", "attachmentId"],
        ),
        _get_ticket_attachment,
    ),
    ToolDefinition(
        "search_ticket_attachments",
        "Search for attachments on a specific ticket",
        _schema({"ticketId": _num("Ticket ID"), "pageSize": PAGE_SIZE}, ["ticketId"]),
        _search(
            "TicketAttachments", "ticket attachments", equals={"ticketId": "parentID"}
        ),
    ),
    # Expense reports
    ToolDefinition(
        "get_expense_report",
        "Get a specific expense report by ID",
        _schema({"reportId": _num("Expense report ID")}, ["reportId"]),
        _get("ExpenseReports", "reportId", "Expense report"),
    ),
    ToolDefinition(
        "search_expense_reports",
        "Search for expense reports with optional filters",
        _schema(
            {
                "submitterId": _num("Filter by submitter resource ID"),
                "status": _num("Filter by status"),
                "pageSize": PAGE_SIZE,
            }
        ),
        _search(
            "ExpenseReports",
            "expense reports",
            equals={"submitterId": "submitterID", "status": "status"},
        ),
    ),
    ToolDefinition(
        "create_expense_report",
        "Create a new expense report",
        _schema(
            {
                "name": _str("Expense report name"),
                "description": _str("Expense report description"),
                "submitterId": _num("Submitter resource ID"),
                "weekEndingDate": _str("Week ending date (YYYY-MM-DD)"),
            },
            ["submitterId"],
        ),
        _create(
            "ExpenseReports",
            "expense report",
            ("name", "description", "submitterId", "weekEndingDate"),
            rename={"submitterId": "submitterID"},
        ),
    ),
    # Quotes
    ToolDefinition(
        "get_quote",
        "Get a specific quote by ID",
        _schema({"quoteId": _num("Quote ID")}, ["quoteId"]),
        _get("Quotes", "quoteId", "Quote"),
    ),
    ToolDefinition(
        "search_quotes",
        "Search for quotes with optional filters",
        _schema(
            {
                "companyId": _num("Filter by company ID"),
                "contactId": _num("Filter by contact ID"),
                "opportunityId": _num("Filter by opportunity ID"),
                "searchTerm": _str("Search term for quote name"),
                "pageSize": PAGE_SIZE,
            }
        ),
        _search(
            "Quotes",
            "quotes",
            term_fields=("name",),
            equals={
                "companyId": "companyID",
                "contactId": "contactID",
                "opportunityId": "opportunityID",
            },
        ),
    ),
    ToolDefinition(
        "create_quote",
        "Create a new quote",
        _schema(
            {
                "name": _str("Quote name"),
                "description": _str("Quote description"),
                "companyId": _num("Company ID"),
                "contactId": _num("Contact ID"),
                "opportunityId": _num("Opportunity ID"),
                "effectiveDate": _str("Effective date (YYYY-MM-DD)"),
                "expirationDate": _str("Expiration date (YYYY-MM-DD)"),
            },
            ["companyId"],
        ),
        _create(
            "Quotes",
            "quote",
            (
                "name",
                "description",
                "companyId",
                "contactId",
                "opportunityId",
                "effectiveDate",
                "expirationDate",
            ),
            rename={
                "companyId": "companyID",
                "contactId": "contactID",
                "opportunityId": "opportunityID",
            },
        ),
    ),
)

TOOLS_BY_NAME: dict[str, ToolDefinition] = {tool.name: tool for tool in TOOL_DEFINITIONS}
