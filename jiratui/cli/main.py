#!/usr/bin/env python3
"""
jiratui CLI - command-line front end for the Jira client
"""

import argparse
import asyncio
import getpass
import json
import sys
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

import httpx
from loguru import logger
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from jiratui.api.jira_client import BaseJiraClient, create_jira_client
from jiratui.cache.fields_cache import FieldsCache
from jiratui.config.settings import settings
from jiratui.core.errors import JiraApiError, JiraTimeoutError
from jiratui.core.protocols import ICredentialStore
from jiratui.logging_config import configure_logging
from jiratui.models.config import CachedCredentials, JiraConfig, JiraMode
from jiratui.models.jira import (
    EditMetaResponse,
    FieldOption,
    JiraField,
    JiraSearchResponse,
    SearchOptions,
    format_datetime,
    get_user_identifier,
)
from jiratui.services.bulk_edit import AVAILABLE_FIELDS, FieldValue, build_update_fields, bulk_update_issues
from jiratui.services.edit_meta import EditMetaService
from jiratui.storage.credential_store import CredentialStore

T = TypeVar("T")

COMMANDS = [
    'login', 'projects', 'issues', 'search', 'fields',
    'field-options', 'edit-meta', 'update',
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jiratui",
        description="jiratui - browse and edit Jira issues on Cloud or Data Center",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  jiratui login --mode onprem --url https://jira.example.com --user alice
  jiratui projects
  jiratui issues DEMO --max-results 20
  jiratui search "assignee = currentUser() ORDER BY updated DESC"
  jiratui field-options severity --project DEMO
  jiratui edit-meta DEMO-1 --project DEMO --issue-type Bug
  jiratui update DEMO-1 DEMO-2 --severity "2 - High"
        """
    )

    parser.add_argument('command', choices=COMMANDS, help='Command to execute')
    parser.add_argument('targets', nargs='*', help='Project key, JQL, field name or issue keys')

    parser.add_argument('--mode', choices=[m.value for m in JiraMode], help='Deployment mode')
    parser.add_argument('--url', help='Jira base URL')
    parser.add_argument('--user', help='Username (onprem) or account email (cloud)')

    parser.add_argument('--start-at', type=int, help='Index of the first result')
    parser.add_argument('--max-results', type=int, help='Page size')
    parser.add_argument('--fields', help='Comma-separated fields to return')

    parser.add_argument('--project', help='Project key (field-options, edit-meta)')
    parser.add_argument('--issue-type', help='Issue type name (edit-meta)')
    parser.add_argument('--no-cache', action='store_true', help='Bypass the edit metadata cache')

    parser.add_argument('--summary', help='New summary (update)')
    parser.add_argument('--severity', help='New severity, by option value or id (update)')

    parser.add_argument(
        '--retries',
        type=int,
        default=1,
        help='Attempts for read-only calls on timeouts or network errors (default: 1)'
    )
    parser.add_argument('--json', action='store_true', help='Print raw JSON')
    parser.add_argument('--verbose', '-v', action='store_true', help='Also log to stderr')
    return parser


def resolve_config(args: argparse.Namespace, store: ICredentialStore) -> JiraConfig:
    """Combine flags, environment settings and cached credentials into a config."""
    cached = store.load()
    mode = args.mode or settings.jira_mode or JiraMode.CLOUD.value
    base_url = args.url or settings.jira_base_url or cached.base_url
    username = args.user or settings.jira_username or cached.username
    if not base_url or not username:
        raise SystemExit("Base URL and username are required (use --url/--user or run 'jiratui login')")

    password = settings.jira_password
    if not password:
        prompt = "API token: " if mode == JiraMode.CLOUD.value else "Password / PAT: "
        password = getpass.getpass(prompt)

    return JiraConfig(mode=JiraMode(mode), base_url=base_url, username=username, password=password)


async def with_retries(call: Callable[[], Awaitable[T]], attempts: int) -> T:
    """Retry a read-only call on timeouts and network errors."""

    def _log_retry(retry_state) -> None:
        logger.warning(
            f"Attempt {retry_state.attempt_number} failed: {retry_state.outcome.exception()}; retrying"
        )

    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(max(attempts, 1)),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((JiraTimeoutError, httpx.TransportError)),
        before_sleep=_log_retry,
        reraise=True,
    ):
        with attempt:
            return await call()


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2))


def _print_issues(raw: dict, is_cloud: bool) -> None:
    response = JiraSearchResponse.model_validate(raw)
    for issue in response.issues:
        fields = issue.fields
        status = fields.status.name if fields.status else ""
        created = format_datetime(fields.created) if fields.created else ""
        assignee = get_user_identifier(fields.assignee, is_cloud)
        print(f"{issue.key:<12} {status:<16} {created:<22} {assignee:<20} {fields.summary}")
    shown_to = response.start_at + len(response.issues)
    more = " (more available)" if response.has_more else ""
    print(f"\n{response.start_at + 1 if response.issues else 0}-{shown_to} of {response.total}{more}")


def _search_options(args: argparse.Namespace, jql: Optional[str] = None) -> SearchOptions:
    fields = [f.strip() for f in args.fields.split(",") if f.strip()] if args.fields else None
    return SearchOptions(jql=jql, start_at=args.start_at, max_results=args.max_results, fields=fields)


def _require_targets(args: argparse.Namespace, what: str) -> List[str]:
    if not args.targets:
        raise SystemExit(f"'{args.command}' requires {what}")
    return args.targets


async def _severity_value(client: BaseJiraClient, wanted: str, project: Optional[str]) -> FieldValue:
    field = next(f for f in AVAILABLE_FIELDS if f.key == "severity")
    options = await client.get_field_options("severity", project)
    index = next(
        (i for i, opt in enumerate(options) if wanted in (opt.get("id"), opt.get("value"))),
        None,
    )
    if index is None:
        choices = ", ".join(opt["value"] for opt in options)
        raise SystemExit(f"Unknown severity '{wanted}'. Choices: {choices}")
    field_id = await client.get_field_id("Severity")
    if not field_id:
        raise SystemExit("Severity field not found on this instance")
    return FieldValue(field=field, value=options[index]["value"], options=options,
                      option_index=index, field_id=field_id)


async def run_command(args: argparse.Namespace, client: BaseJiraClient, store: ICredentialStore) -> int:
    retries = args.retries

    if args.command == 'login':
        await client.validate_connection()
        store.save(CachedCredentials(base_url=client.config.base_url, username=client.config.username))
        print(f"Connected to {client.config.base_url} ({client.config.mode.value})")
        return 0

    if args.command == 'projects':
        projects = await with_retries(client.get_projects, retries)
        if args.json:
            _print_json(projects)
        else:
            for project in projects:
                print(f"{project.get('key', ''):<12} {project.get('name', '')}")
        return 0

    if args.command in ('issues', 'search'):
        if args.command == 'issues':
            project_key = _require_targets(args, "a project key")[0]
            options = _search_options(args)
            raw = await with_retries(lambda: client.get_project_issues(project_key, options), retries)
        else:
            jql = " ".join(_require_targets(args, "a JQL query"))
            options = _search_options(args, jql)
            raw = await with_retries(lambda: client.search_issues(options), retries)
        if args.json:
            _print_json(raw)
        else:
            _print_issues(raw, client.is_cloud)
        return 0

    if args.command == 'fields':
        fields = await with_retries(client.get_fields, retries)
        if args.json:
            _print_json(fields)
        else:
            for field in (JiraField.model_validate(f) for f in fields):
                print(f"{field.id:<24} {field.name}")
        return 0

    if args.command == 'field-options':
        name = _require_targets(args, "a field name")[0]
        options = await with_retries(lambda: client.get_field_options(name, args.project), retries)
        if args.json:
            _print_json(options)
        elif not options:
            print(f"No options known for '{name}'")
        else:
            for option in (FieldOption.model_validate(o) for o in options):
                print(f"{option.id:<8} {option.value}")
        return 0

    if args.command == 'edit-meta':
        issue_key = _require_targets(args, "an issue key")[0]
        if not args.project or not args.issue_type:
            raise SystemExit("'edit-meta' requires --project and --issue-type")
        service = EditMetaService(client, None if args.no_cache else FieldsCache())
        fields = await with_retries(
            lambda: service.get_edit_meta(issue_key, args.project, args.issue_type), retries
        )
        if args.json:
            _print_json(fields)
        else:
            editmeta = EditMetaResponse.model_validate({"fields": fields})
            for field_id, field in editmeta.fields.items():
                allowed = field.allowed_values or []
                suffix = f" ({len(allowed)} values)" if allowed else ""
                print(f"{field_id:<24} {field.name}{suffix}")
        return 0

    if args.command == 'update':
        issue_keys = _require_targets(args, "one or more issue keys")
        values: List[FieldValue] = []
        if args.summary:
            summary_field = next(f for f in AVAILABLE_FIELDS if f.key == "summary")
            values.append(FieldValue(field=summary_field, value=args.summary))
        if args.severity:
            values.append(await _severity_value(client, args.severity, args.project))

        payload = build_update_fields(values)
        if not payload:
            print("No changes to save")
            return 1

        def _progress(key: str, index: int, total: int) -> None:
            print(f"Saving {key}... ({index + 1}/{total})")

        result = await bulk_update_issues(client, issue_keys, payload, on_progress=_progress)
        print(result.message)
        return 0 if result.success else 1

    raise SystemExit(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(stderr=args.verbose)

    store = CredentialStore()
    config = resolve_config(args, store)
    client = create_jira_client(config)

    try:
        return asyncio.run(run_command(args, client, store))
    except JiraTimeoutError:
        print("Request timed out", file=sys.stderr)
    except JiraApiError as e:
        print(f"{e.message}", file=sys.stderr)
        if e.response_body:
            print(e.response_body, file=sys.stderr)
    except httpx.TransportError as e:
        print(f"Network error: {e}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
