"""Pure formatting of notification events for logs and chat.

``format_event`` maps an event and the project identifier to a
``FormattedMessage``. It performs no I/O and reads no configuration, so
identical inputs always produce identical output.

Usage
-----
>>> from clusternotify.formatting import format_event
>>> message = format_event(event, "my-project")
>>> print(message.text)
2024-05-01T10:00:00Z UpgradeEvent cluster-a upgrading 1.27 -> 1.28

"""

from __future__ import annotations

import typing as typ
import urllib.parse

import msgspec

from clusternotify.events.models import (
    NODE_POOL_RESOURCE_TYPES,
    ClusterEvent,
    GenericEvent,
    SecurityBulletinEvent,
    UpgradeAvailableEvent,
    UpgradeEvent,
)

from .blocks import (
    MAX_HEADER_LENGTH,
    MAX_SECTION_FIELDS,
    Block,
    ContextBlock,
    HeaderBlock,
    SectionBlock,
    Text,
    escape_mrkdwn,
)
from .models import Field, FormattedMessage, Link

if typ.TYPE_CHECKING:
    import collections.abc as cabc

CLUSTER_CONSOLE_URL_TEMPLATE = (
    "https://console.cloud.google.com/kubernetes/clusters/details/{location}/"
    "{cluster_name}/details?project={project_id}"
)
NODE_POOL_CONSOLE_URL_TEMPLATE = (
    "https://console.cloud.google.com/kubernetes/nodepool/{location}/"
    "{cluster_name}/{node_pool_name}?project={project_id}"
)
# Console wildcard used when the location is unknown
ANY_LOCATION = "-"
MISSING = "-"
UNSPECIFIED_CHANNEL = "UNSPECIFIED"
TRANSITION_ARROW = "->"


def console_url(
    *,
    project_id: str,
    resource_type: str,
    resource_name: str,
    location: str = "",
    cluster_name: str = "",
) -> str:
    """Build the Cloud Console deep-link for a cluster resource.

    Node pools link to the node pool page of ``cluster_name``; every other
    resource type (``master``, ``cluster`` and so on) links to the cluster
    details page for ``resource_name``.
    """

    def quote(value: str) -> str:
        return urllib.parse.quote(value, safe="")

    if resource_type in NODE_POOL_RESOURCE_TYPES:
        return NODE_POOL_CONSOLE_URL_TEMPLATE.format(
            project_id=quote(project_id),
            location=quote(location or ANY_LOCATION),
            cluster_name=quote(cluster_name or MISSING),
            node_pool_name=quote(resource_name),
        )
    return CLUSTER_CONSOLE_URL_TEMPLATE.format(
        project_id=quote(project_id),
        location=quote(location or ANY_LOCATION),
        cluster_name=quote(resource_name),
    )


def version_transition(current: str, target: str) -> str:
    """Return ``current -> target``, or whichever side is known."""
    if current and target:
        return f"{current} {TRANSITION_ARROW} {target}"
    return target or current


def _single_line(text: str) -> str:
    return " ".join(text.split())


def _render_value(value: object) -> str:
    """Render an arbitrary JSON value as stable display text."""
    if isinstance(value, str):
        return value
    return msgspec.json.encode(value, order="sorted").decode("utf-8")


def _resource_type(event: ClusterEvent) -> str:
    match event:
        case UpgradeAvailableEvent() | UpgradeEvent():
            candidate = event.resource.type or event.resource_type
        case SecurityBulletinEvent():
            candidate = event.resource.type or event.resource_type_affected
        case _:
            candidate = event.resource.type
    if candidate:
        return candidate
    return "cluster" if event.resource_name else ""


def _resource_uri(event: ClusterEvent, project_id: str) -> str:
    if event.resource.path:
        return event.resource.path
    if not event.resource_name:
        return ""
    return (
        f"projects/{project_id or MISSING}/locations/{event.location or MISSING}/"
        f"clusters/{event.resource_name}"
    )


def _description(event: ClusterEvent) -> str:
    """Return the payload description, or the text GKE sent in ``data``."""
    return event.description or event.metadata.message_text


def _optional_fields(*pairs: tuple[str, str]) -> list[Field]:
    return [Field(label=label, value=value) for label, value in pairs if value]


class _Body(typ.NamedTuple):
    summary: str
    fields: list[Field]
    description: str = ""


def _upgrade_available_body(event: UpgradeAvailableEvent, project_id: str) -> _Body:
    transition = version_transition(event.current_version, event.available_version)
    channel = event.release_channel.channel
    summary = f"upgrade available {transition}".strip()
    if channel and channel != UNSPECIFIED_CHANNEL:
        summary = f"{summary} channel={channel}"
    fields = _optional_fields(
        ("Resource Type", _resource_type(event)),
        ("Location", event.location),
        ("Version", transition),
        ("Release Channel", channel),
        ("Project", project_id),
    )
    return _Body(summary, fields, _description(event))


def _upgrade_body(event: UpgradeEvent, project_id: str) -> _Body:
    transition = version_transition(event.current_version, event.target_version)
    summary = f"upgrading {transition}".strip()
    if event.operation:
        summary = f"{summary} operation={event.operation}"
    fields = _optional_fields(
        ("Resource Type", _resource_type(event)),
        ("Location", event.location),
        ("Version", transition),
        ("Operation", event.operation),
        ("Started", event.operation_start_time),
        ("Project", project_id),
    )
    return _Body(summary, fields, _description(event))


def _security_bulletin_body(event: SecurityBulletinEvent, project_id: str) -> _Body:
    severity = event.severity or "UNSPECIFIED"
    summary = f"severity={severity}"
    if event.bulletin_id:
        summary = f"{summary} bulletin={event.bulletin_id}"
    if event.brief_description:
        summary = f"{summary} {event.brief_description}"

    fields = [Field(label="Severity", value=severity, highlight=True)]
    if event.bulletin_id or event.bulletin_uri:
        fields.append(
            Field(
                label="Security Bulletin",
                value=event.bulletin_id or "View Details",
                url=event.bulletin_uri,
            )
        )
    fields.extend(
        _optional_fields(
            ("Resource Type", _resource_type(event)),
            ("Location", event.location),
            ("Manual Steps Required", "Yes" if event.manual_steps_required else "No"),
            ("Patched Versions", ", ".join(event.patched_versions)),
            ("Suggested Upgrade Target", event.suggested_upgrade_target),
            ("Affected Minor Versions", ", ".join(event.affected_supported_minors)),
            ("CVEs", ", ".join(event.cve_ids)),
            ("Project", project_id),
        )
    )
    return _Body(summary, fields, event.brief_description or _description(event))


def _generic_body(event: GenericEvent) -> _Body:
    keys = sorted(event.attributes)
    fields = [
        Field(label=key, value=_render_value(event.attributes[key])) for key in keys
    ]
    if event.metadata.message_text:
        fields.insert(0, Field(label="Message", value=event.metadata.message_text))
    summary = " ".join(
        f"{key}={_render_value(event.attributes[key])}"
        for key in keys
        if key != "type"
    )
    return _Body(summary, fields, event.description)


def _body(event: ClusterEvent, project_id: str) -> _Body:
    match event:
        case UpgradeAvailableEvent():
            return _upgrade_available_body(event, project_id)
        case UpgradeEvent():
            return _upgrade_body(event, project_id)
        case SecurityBulletinEvent():
            return _security_bulletin_body(event, project_id)
        case GenericEvent():
            return _generic_body(event)
        case _:
            msg = f"unsupported notification variant: {type(event).__name__}"
            raise TypeError(msg)


def _cluster_name(event: ClusterEvent) -> str:
    """Return the cluster a resource belongs to, from its path or the envelope."""
    segments = event.resource.path.split("/")
    for collection, identifier in zip(segments[0::2], segments[1::2], strict=False):
        if collection == "clusters":
            return identifier
    return event.metadata.cluster_name


def _console_link(event: ClusterEvent, project_id: str) -> Link | None:
    resource_type = _resource_type(event)
    if not (project_id and event.resource_name and resource_type):
        return None
    return Link(
        label="View in Console",
        url=console_url(
            project_id=project_id,
            resource_type=resource_type,
            resource_name=event.resource_name,
            location=event.location,
            cluster_name=_cluster_name(event),
        ),
    )


def _context(event: ClusterEvent, project_id: str) -> tuple[str, ...]:
    metadata = event.metadata
    lines = [
        _resource_uri(event, project_id),
        f"Type URL: {metadata.type_url}" if metadata.type_url else "",
        f"Message ID: {metadata.message_id}" if metadata.message_id else "",
    ]
    return tuple(line for line in lines if line)


def _field_text(field: Field) -> Text:
    value = escape_mrkdwn(field.value)
    if field.url:
        value = f"<{field.url}|{value}>"
    if field.highlight:
        value = f":rotating_light: *{value}*"
    return Text.mrkdwn(f"*{escape_mrkdwn(field.label)}*\n{value}")


def render_blocks(
    *,
    title: str,
    description: str,
    fields: cabc.Sequence[Field],
    link: Link | None,
    context: cabc.Sequence[str],
) -> tuple[Block, ...]:
    """Lay out message parts as Slack Block Kit blocks.

    The layout is a header, an optional description section, field sections
    of at most ten fields, the console link and a context footer.
    """
    header = title
    if len(header) > MAX_HEADER_LENGTH:
        header = header[: MAX_HEADER_LENGTH - 3] + "..."
    blocks: list[Block] = [HeaderBlock(text=Text.plain(f":gear: {header}"))]

    if description:
        blocks.append(SectionBlock(text=Text.mrkdwn(escape_mrkdwn(description))))

    field_texts = [_field_text(field) for field in fields]
    blocks.extend(
        SectionBlock(fields=tuple(field_texts[start : start + MAX_SECTION_FIELDS]))
        for start in range(0, len(field_texts), MAX_SECTION_FIELDS)
    )

    if link is not None:
        blocks.append(
            SectionBlock(text=Text.mrkdwn(f"*Resource*\n<{link.url}|{link.label}>"))
        )

    if context:
        blocks.append(
            ContextBlock(
                elements=tuple(Text.mrkdwn(escape_mrkdwn(line)) for line in context)
            )
        )
    return tuple(blocks)


def format_event(event: ClusterEvent, project_id: str) -> FormattedMessage:
    """Format ``event`` for the log and for chat delivery.

    Parameters
    ----------
    event
        Parsed notification event.
    project_id
        Configured project identifier used for console links. When empty, the
        ``project_id`` attribute of the envelope is used instead.

    Returns
    -------
    FormattedMessage
        Title, single-line text, ordered fields, link, context and blocks.

    """
    project_id = project_id or event.metadata.project_id
    body = _body(event, project_id)
    resource = event.resource_name or MISSING
    timestamp = event.metadata.publish_time or MISSING
    title = f"{event.event_type}: {resource}"
    text = _single_line(f"{timestamp} {event.event_type} {resource} {body.summary}")
    link = _console_link(event, project_id)
    context = _context(event, project_id)
    fields = tuple(body.fields)
    return FormattedMessage(
        event_type=event.event_type,
        kind=event.kind,
        title=title,
        text=text,
        description=body.description,
        fields=fields,
        link=link,
        context=context,
        blocks=render_blocks(
            title=title,
            description=body.description,
            fields=fields,
            link=link,
            context=context,
        ),
    )
