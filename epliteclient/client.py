"""
Client for the Etherpad Lite HTTP API.

Every method maps to one API call and performs exactly one request:

    with EtherpadClient("http://localhost:9001", api_key) as client:
        group_id = client.create_group()["groupID"]
        client.create_group_pad(group_id, "notes", text="Hello")
        print(client.list_pads(group_id)["padIDs"])

Methods return the decoded ``data`` mapping of the response (an empty dict
when the server sends null). ``get_author_name`` and
``get_revision_changeset`` return the bare string the server sends.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import httpx

from epliteclient.config import Settings
from epliteclient.connection import DEFAULT_API_VERSION, DEFAULT_ENCODING, Connection
from epliteclient.models import SessionExpiry, ValidFor, ValidThrough, ValidUntil
from epliteclient.transport import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

SECURE_PORT = 443


class EtherpadClient:
    """Client for the Etherpad Lite HTTP API."""

    def __init__(
        self,
        url: str,
        api_key: str,
        api_version: str = DEFAULT_API_VERSION,
        encoding: str = DEFAULT_ENCODING,
        *,
        timeout: float | None = DEFAULT_TIMEOUT,
        verify: bool = True,
        http_client: httpx.Client | None = None,
    ):
        """
        Initialize the client.

        Args:
            url: Absolute URL of the Etherpad Lite instance, including protocol.
            api_key: The API key.
            api_version: Etherpad Lite API version (default "1.2.13").
            encoding: Character encoding of POST bodies (default "UTF-8").
            timeout: Request timeout in seconds, None to wait forever.
            verify: Validate TLS certificates.
            http_client: Optional pre-configured httpx client.
        """
        self._connection = Connection(
            url,
            api_key,
            api_version,
            encoding,
            timeout=timeout,
            verify=verify,
            http_client=http_client,
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **kwargs: Any) -> EtherpadClient:
        """
        Build a client from ETHERPAD_* environment variables or a .env file.

        Raises:
            ValueError: If no API key is configured.
        """
        settings = settings or Settings()
        settings.validate_api_key()
        return cls(
            settings.url,
            settings.api_key,
            settings.api_version,
            settings.encoding,
            timeout=settings.timeout,
            verify=settings.verify_ssl,
            **kwargs,
        )

    @property
    def connection(self) -> Connection:
        return self._connection

    @property
    def is_secure(self) -> bool:
        """
        True if the configured URL names port 443 explicitly.

        This only looks at the port number. It does not check the scheme and
        says nothing about certificate validation; see ``uses_https``.
        """
        return self._connection.port == SECURE_PORT

    @property
    def uses_https(self) -> bool:
        """True if the configured URL uses the https scheme."""
        return self._connection.scheme.lower() == "https"

    def close(self) -> None:
        self._connection.close()

    def __enter__(self) -> EtherpadClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Groups
    # -------------------------------------------------------------------------
    # Pads may belong to a group. Group pads are not public; only authors
    # holding a session for the group can open them.

    def create_group(self) -> dict[str, Any]:
        """Create a new group. The group id is returned in "groupID"."""
        return self._connection.post("createGroup")

    def create_group_if_not_exists_for(self, group_mapper: str) -> dict[str, Any]:
        """
        Create a group for the given mapper unless one exists already.

        The mapper is an identifier from your own application; the group id
        is returned in "groupID".
        """
        return self._connection.post("createGroupIfNotExistsFor", {"groupMapper": group_mapper})

    def delete_group(self, group_id: str) -> dict[str, Any]:
        """Delete a group and all of its pads."""
        return self._connection.post("deleteGroup", {"groupID": group_id})

    def list_pads(self, group_id: str) -> dict[str, Any]:
        """List the pads of a group in "padIDs"."""
        return self._connection.get("listPads", {"groupID": group_id})

    def create_group_pad(self, group_id: str, pad_name: str, text: str | None = None) -> dict[str, Any]:
        """
        Create a pad in a group.

        Args:
            group_id: The group the pad belongs to.
            pad_name: Name of the pad; the full id becomes "<groupID>$<padName>".
            text: Optional initial text.

        Returns:
            Mapping with "padID".
        """
        args: dict[str, Any] = {"groupID": group_id, "padName": pad_name}
        if text is not None:
            args["text"] = text
        return self._connection.post("createGroupPad", args)

    def list_all_groups(self) -> dict[str, Any]:
        """List all group ids in "groupIDs"."""
        return self._connection.get("listAllGroups")

    # -------------------------------------------------------------------------
    # Authors
    # -------------------------------------------------------------------------

    def create_author(self, name: str | None = None) -> dict[str, Any]:
        """Create an author, optionally named. The id is returned in "authorID"."""
        if name is None:
            return self._connection.get("createAuthor")
        return self._connection.post("createAuthor", {"name": name})

    def create_author_if_not_exists_for(self, author_mapper: str, name: str | None = None) -> dict[str, Any]:
        """Create an author for the given mapper unless one exists already."""
        args: dict[str, Any] = {"authorMapper": author_mapper}
        if name is not None:
            args["name"] = name
        return self._connection.post("createAuthorIfNotExistsFor", args)

    def list_pads_of_author(self, author_id: str) -> dict[str, Any]:
        return self._connection.get("listPadsOfAuthor", {"authorID": author_id})

    def get_author_name(self, author_id: str) -> str | None:
        """Return the author's name as a bare string."""
        return self._connection.get_object("getAuthorName", {"authorID": author_id})

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------
    # A session links an author to a group until a point in time. Web clients
    # carry the session id as the "sessionID" cookie.

    def create_session(self, group_id: str, author_id: str, expiry: SessionExpiry | int) -> dict[str, Any]:
        """
        Create a session for an author in a group.

        Args:
            group_id: The group.
            author_id: The author.
            expiry: When the session ends: a ValidUntil, ValidFor or
                ValidThrough, or a UNIX timestamp in seconds.

        Returns:
            Mapping with "sessionID".
        """
        if isinstance(expiry, bool):
            raise TypeError("expiry must be an expiry or a UNIX timestamp, not a bool")
        if isinstance(expiry, int):
            expiry = ValidUntil(expiry)
        valid_until = expiry.to_epoch_seconds()
        logger.debug(f"Creating session for {author_id} in {group_id} valid until {valid_until}")
        return self._connection.post(
            "createSession",
            {"groupID": group_id, "authorID": author_id, "validUntil": str(valid_until)},
        )

    def create_session_valid_until(self, group_id: str, author_id: str, valid_until: int) -> dict[str, Any]:
        """Create a session valid until the given UNIX time, in seconds."""
        return self.create_session(group_id, author_id, ValidUntil(valid_until))

    def create_session_for_hours(self, group_id: str, author_id: str, hours: int) -> dict[str, Any]:
        """Create a session valid for the given number of hours from now."""
        return self.create_session(group_id, author_id, ValidFor(hours))

    def create_session_until(self, group_id: str, author_id: str, moment: datetime) -> dict[str, Any]:
        """Create a session valid until the given datetime."""
        return self.create_session(group_id, author_id, ValidThrough(moment))

    def delete_session(self, session_id: str) -> dict[str, Any]:
        return self._connection.post("deleteSession", {"sessionID": session_id})

    def get_session_info(self, session_id: str) -> dict[str, Any]:
        """Return "authorID", "groupID" and "validUntil" of a session."""
        return self._connection.get("getSessionInfo", {"sessionID": session_id})

    def list_sessions_of_group(self, group_id: str) -> dict[str, Any]:
        """Return the group's sessions, keyed by session id."""
        return self._connection.get("listSessionsOfGroup", {"groupID": group_id})

    def list_sessions_of_author(self, author_id: str) -> dict[str, Any]:
        """Return the author's sessions, keyed by session id."""
        return self._connection.get("listSessionsOfAuthor", {"authorID": author_id})

    # -------------------------------------------------------------------------
    # Pad content
    # -------------------------------------------------------------------------

    def get_text(self, pad_id: str, rev: int | None = None) -> dict[str, Any]:
        """Return the pad's text in "text", at the latest or the given revision."""
        args: dict[str, Any] = {"padID": pad_id}
        if rev is not None:
            args["rev"] = rev
        return self._connection.get("getText", args)

    def set_text(self, pad_id: str, text: str) -> dict[str, Any]:
        return self._connection.post("setText", {"padID": pad_id, "text": text})

    def append_text(self, pad_id: str, text: str) -> dict[str, Any]:
        return self._connection.post("appendText", {"padID": pad_id, "text": text})

    def get_html(self, pad_id: str, rev: int | None = None) -> dict[str, Any]:
        """Return the pad's content as HTML in "html"."""
        args: dict[str, Any] = {"padID": pad_id}
        if rev is not None:
            args["rev"] = rev
        return self._connection.get("getHTML", args)

    def set_html(self, pad_id: str, html: str) -> dict[str, Any]:
        return self._connection.post("setHTML", {"padID": pad_id, "html": html})

    def get_attribute_pool(self, pad_id: str) -> dict[str, Any]:
        return self._connection.get("getAttributePool", {"padID": pad_id})

    def get_revision_changeset(self, pad_id: str, rev: int | None = None) -> str | None:
        """Return the changeset of the latest or the given revision as a string."""
        args: dict[str, Any] = {"padID": pad_id}
        if rev is not None:
            args["rev"] = rev
        return self._connection.get_object("getRevisionChangeset", args)

    def create_diff_html(self, pad_id: str, start_rev: int, end_rev: int) -> dict[str, Any]:
        """Return the diff between two revisions as "html" plus the involved "authors"."""
        return self._connection.get("createDiffHTML", {"padID": pad_id, "startRev": start_rev, "endRev": end_rev})

    # -------------------------------------------------------------------------
    # Chat
    # -------------------------------------------------------------------------

    def get_chat_history(self, pad_id: str, start: int | None = None, end: int | None = None) -> dict[str, Any]:
        """
        Return chat "messages" of a pad.

        Without ``start`` and ``end`` the whole history is returned.

        Raises:
            ValueError: If only one of ``start`` and ``end`` is given.
        """
        if (start is None) != (end is None):
            raise ValueError("start and end must be given together")
        args: dict[str, Any] = {"padID": pad_id}
        if start is not None:
            args["start"] = start
            args["end"] = end
        return self._connection.get("getChatHistory", args)

    def get_chat_head(self, pad_id: str) -> dict[str, Any]:
        """Return the number of the last chat message in "chatHead"."""
        return self._connection.get("getChatHead", {"padID": pad_id})

    def append_chat_message(
        self, pad_id: str, text: str, author_id: str, time: int | None = None
    ) -> dict[str, Any]:
        """Post a chat message as an author; ``time`` is a UNIX timestamp in seconds."""
        args: dict[str, Any] = {"padID": pad_id, "text": text, "authorID": author_id}
        if time is not None:
            args["time"] = time
        return self._connection.post("appendChatMessage", args)

    # -------------------------------------------------------------------------
    # Pads
    # -------------------------------------------------------------------------
    # Group pads are addressed as "<groupID>$<padName>".

    def list_all_pads(self) -> dict[str, Any]:
        return self._connection.get("listAllPads")

    def create_pad(self, pad_id: str, text: str | None = None) -> dict[str, Any]:
        """Create a public pad, optionally with initial text."""
        args: dict[str, Any] = {"padID": pad_id}
        if text is not None:
            args["text"] = text
        return self._connection.post("createPad", args)

    def get_revisions_count(self, pad_id: str) -> dict[str, Any]:
        return self._connection.get("getRevisionsCount", {"padID": pad_id})

    def get_saved_revisions_count(self, pad_id: str) -> dict[str, Any]:
        return self._connection.get("getSavedRevisionsCount", {"padID": pad_id})

    def list_saved_revisions(self, pad_id: str) -> dict[str, Any]:
        return self._connection.get("listSavedRevisions", {"padID": pad_id})

    def save_revision(self, pad_id: str, rev: int | None = None) -> dict[str, Any]:
        """Mark the latest or the given revision as saved."""
        args: dict[str, Any] = {"padID": pad_id}
        if rev is not None:
            args["rev"] = rev
        return self._connection.post("saveRevision", args)

    def pad_users_count(self, pad_id: str) -> dict[str, Any]:
        return self._connection.get("padUsersCount", {"padID": pad_id})

    def pad_users(self, pad_id: str) -> dict[str, Any]:
        return self._connection.get("padUsers", {"padID": pad_id})

    def delete_pad(self, pad_id: str) -> dict[str, Any]:
        return self._connection.post("deletePad", {"padID": pad_id})

    def copy_pad(self, source_id: str, destination_id: str, force: bool = False) -> dict[str, Any]:
        """Copy a pad. With ``force`` an existing destination is overwritten."""
        return self._connection.post(
            "copyPad", {"sourceID": source_id, "destinationID": destination_id, "force": force}
        )

    def move_pad(self, source_id: str, destination_id: str, force: bool = False) -> dict[str, Any]:
        """Move a pad. With ``force`` an existing destination is overwritten."""
        return self._connection.post(
            "movePad", {"sourceID": source_id, "destinationID": destination_id, "force": force}
        )

    def get_read_only_id(self, pad_id: str) -> dict[str, Any]:
        return self._connection.get("getReadOnlyID", {"padID": pad_id})

    def get_pad_id(self, read_only_id: str) -> dict[str, Any]:
        """Resolve a read-only id back to its "padID"."""
        return self._connection.get("getPadID", {"roID": read_only_id})

    def set_public_status(self, pad_id: str, public_status: bool) -> dict[str, Any]:
        """Set the public status of a group pad."""
        return self._connection.post("setPublicStatus", {"padID": pad_id, "publicStatus": public_status})

    def get_public_status(self, pad_id: str) -> dict[str, Any]:
        return self._connection.get("getPublicStatus", {"padID": pad_id})

    def set_password(self, pad_id: str, password: str) -> dict[str, Any]:
        return self._connection.post("setPassword", {"padID": pad_id, "password": password})

    def is_password_protected(self, pad_id: str) -> dict[str, Any]:
        return self._connection.get("isPasswordProtected", {"padID": pad_id})

    def list_authors_of_pad(self, pad_id: str) -> dict[str, Any]:
        return self._connection.get("listAuthorsOfPad", {"padID": pad_id})

    def get_last_edited(self, pad_id: str) -> dict[str, Any]:
        """Return the "lastEdited" timestamp of a pad (milliseconds)."""
        return self._connection.get("getLastEdited", {"padID": pad_id})

    def send_clients_message(self, pad_id: str, msg: str) -> dict[str, Any]:
        """Send a custom message to every client connected to the pad."""
        return self._connection.post("sendClientsMessage", {"padID": pad_id, "msg": msg})

    def check_token(self) -> dict[str, Any]:
        """Check that the API key is valid; raises ApiFailure otherwise."""
        return self._connection.get("checkToken")
