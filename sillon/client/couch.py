import json
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from sillon.config import settings
from sillon.exceptions import CouchError

LOG = structlog.get_logger()

JSONDict = dict[str, Any]


def _quote(segment: str) -> str:
    return quote(segment, safe="")


def _view_params(
    *,
    key: Any = None,
    startkey: Any = None,
    endkey: Any = None,
    limit: int | None = None,
    skip: int | None = None,
    descending: bool = False,
    include_docs: bool = False,
    reduce: bool | None = None,
    group: bool = False,
    group_level: int | None = None,
    inclusive_end: bool | None = None,
    conflicts: bool = False,
) -> dict[str, str]:
    """Build the query string shared by _all_docs and view queries. Keys are JSON encoded."""
    params: dict[str, str] = {}
    if key is not None:
        params["key"] = json.dumps(key)
    if startkey is not None:
        params["startkey"] = json.dumps(startkey)
    if endkey is not None:
        params["endkey"] = json.dumps(endkey)
    if limit is not None:
        params["limit"] = str(limit)
    if skip is not None:
        params["skip"] = str(skip)
    if descending:
        params["descending"] = "true"
    if include_docs:
        params["include_docs"] = "true"
    if reduce is False:
        params["reduce"] = "false"
    elif reduce is True:
        params["reduce"] = "true"
    if group:
        params["group"] = "true"
    if group_level is not None:
        params["group_level"] = str(group_level)
    if inclusive_end is False:
        params["inclusive_end"] = "false"
    if conflicts:
        params["conflicts"] = "true"
    return params


def _paging_params(limit: int | None, skip: int | None) -> dict[str, str]:
    params: dict[str, str] = {}
    if limit is not None:
        params["limit"] = str(limit)
    if skip is not None:
        params["skip"] = str(skip)
    return params


class CouchClient:
    """Thin synchronous wrapper over the CouchDB HTTP API.

    Credentials embedded in ``url`` are sent as basic auth; everything else about the URL
    except scheme and host is ignored.
    """

    def __init__(self, url: str, *, timeout: float | None = None, transport: httpx.BaseTransport | None = None):
        parsed = httpx.URL(url.rstrip("/"))
        # netloc never includes the userinfo part
        self.base_url = f"{parsed.scheme}://{parsed.netloc.decode()}"
        auth = httpx.BasicAuth(parsed.username, parsed.password) if parsed.username or parsed.password else None
        self._client = httpx.Client(
            base_url=self.base_url,
            auth=auth,
            timeout=timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    def __enter__(self) -> "CouchClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        body: Any = None,
    ) -> Any:
        kwargs: dict[str, Any] = {"params": params or None}
        if body is not None:
            kwargs["json"] = body
        LOG.debug("CouchDB request", method=method, path=path)
        response = self._client.request(method, path, **kwargs)
        if response.is_error:
            raise CouchError(self._error_message(response), status_code=response.status_code)
        return response.json()

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        text = response.text
        try:
            error = json.loads(text)
        except ValueError:
            return text or f"HTTP {response.status_code}"
        if isinstance(error, dict):
            return error.get("reason") or error.get("error") or text
        return text

    # server

    def server_info(self) -> JSONDict:
        return self.request("GET", "/")

    def is_up(self) -> bool:
        try:
            self.request("GET", "/_up")
        except (CouchError, httpx.TransportError):
            return False
        return True

    def active_tasks(self) -> list[JSONDict]:
        return self.request("GET", "/_active_tasks")

    def membership(self) -> JSONDict:
        return self.request("GET", "/_membership")

    def cluster_setup(self) -> JSONDict:
        return self.request("GET", "/_cluster_setup")

    def node_info(self, node: str = "_local") -> JSONDict:
        return self.request("GET", f"/_node/{_quote(node)}")

    def node_stats(self, node: str = "_local") -> JSONDict:
        return self.request("GET", f"/_node/{_quote(node)}/_stats")

    def node_system(self, node: str = "_local") -> JSONDict:
        return self.request("GET", f"/_node/{_quote(node)}/_system")

    def scheduler_jobs(self, *, limit: int | None = None, skip: int | None = None) -> JSONDict:
        return self.request("GET", "/_scheduler/jobs", params=_paging_params(limit, skip))

    def scheduler_docs(
        self, *, limit: int | None = None, skip: int | None = None, replicator: str = "_replicator"
    ) -> JSONDict:
        return self.request("GET", f"/_scheduler/docs/{replicator}", params=_paging_params(limit, skip))

    # databases

    def list_databases(self) -> list[str]:
        return self.request("GET", "/_all_dbs")

    def create_database(self, name: str, *, partitioned: bool = False) -> JSONDict:
        params = {"partitioned": "true"} if partitioned else None
        return self.request("PUT", f"/{_quote(name)}", params=params)

    def delete_database(self, name: str) -> JSONDict:
        return self.request("DELETE", f"/{_quote(name)}")

    def database_info(self, name: str) -> JSONDict:
        return self.request("GET", f"/{_quote(name)}")

    def dbs_info(self, keys: list[str]) -> list[JSONDict]:
        return self.request("POST", "/_dbs_info", body={"keys": keys})

    def compact(self, db: str) -> JSONDict:
        return self.request("POST", f"/{_quote(db)}/_compact")

    def compact_view(self, db: str, ddoc: str) -> JSONDict:
        return self.request("POST", f"/{_quote(db)}/_compact/{_quote(ddoc)}")

    def view_cleanup(self, db: str) -> JSONDict:
        return self.request("POST", f"/{_quote(db)}/_view_cleanup")

    # documents

    def all_docs(
        self,
        db: str,
        *,
        keys: list[str] | None = None,
        startkey: str | None = None,
        endkey: str | None = None,
        limit: int | None = None,
        skip: int | None = None,
        descending: bool = False,
        include_docs: bool = False,
        inclusive_end: bool | None = None,
        conflicts: bool = False,
    ) -> JSONDict:
        path = f"/{_quote(db)}/_all_docs"
        if keys is not None:
            params = {"include_docs": "true"} if include_docs else None
            return self.request("POST", path, params=params, body={"keys": keys})
        params = _view_params(
            startkey=startkey,
            endkey=endkey,
            limit=limit,
            skip=skip,
            descending=descending,
            include_docs=include_docs,
            inclusive_end=inclusive_end,
            conflicts=conflicts,
        )
        return self.request("GET", path, params=params)

    def design_docs(self, db: str, *, include_docs: bool = False) -> JSONDict:
        return self.all_docs(db, startkey="_design/", endkey="_design0", include_docs=include_docs)

    def get_document(self, db: str, doc_id: str) -> JSONDict:
        return self.request("GET", f"/{_quote(db)}/{_quote(doc_id)}")

    def create_document(self, db: str, doc: JSONDict) -> JSONDict:
        return self.request("POST", f"/{_quote(db)}", body=doc)

    def put_document(self, db: str, doc: JSONDict) -> JSONDict:
        return self.request("PUT", f"/{_quote(db)}/{_quote(doc['_id'])}", body=doc)

    def delete_document(self, db: str, doc_id: str, rev: str) -> JSONDict:
        return self.request("DELETE", f"/{_quote(db)}/{_quote(doc_id)}", params={"rev": rev})

    def bulk_docs(self, db: str, docs: list[JSONDict], *, new_edits: bool = True) -> list[JSONDict]:
        body: JSONDict = {"docs": docs}
        if not new_edits:
            body["new_edits"] = False
        return self.request("POST", f"/{_quote(db)}/_bulk_docs", body=body)

    def conflicts(self, db: str, *, limit: int | None = None) -> JSONDict:
        return self.all_docs(db, include_docs=True, conflicts=True, limit=limit)

    def purge(self, db: str, docs_revs: dict[str, list[str]]) -> JSONDict:
        return self.request("POST", f"/{_quote(db)}/_purge", body=docs_revs)

    def purged_infos_limit(self, db: str) -> int:
        return self.request("GET", f"/{_quote(db)}/_purged_infos_limit")

    def set_purged_infos_limit(self, db: str, limit: int) -> JSONDict:
        return self.request("PUT", f"/{_quote(db)}/_purged_infos_limit", body=limit)

    # views and queries

    def query_view(self, db: str, ddoc: str, view: str, **options: Any) -> JSONDict:
        path = f"/{_quote(db)}/_design/{_quote(ddoc)}/_view/{_quote(view)}"
        return self.request("GET", path, params=_view_params(**options))

    def mango_query(self, db: str, query: JSONDict) -> JSONDict:
        return self.request("POST", f"/{_quote(db)}/_find", body=query)

    def list_indexes(self, db: str) -> JSONDict:
        return self.request("GET", f"/{_quote(db)}/_index")

    def create_index(self, db: str, index: JSONDict) -> JSONDict:
        return self.request("POST", f"/{_quote(db)}/_index", body=index)

    def delete_index(self, db: str, ddoc: str, name: str) -> JSONDict:
        ddoc_name = ddoc.removeprefix("_design/")
        return self.request("DELETE", f"/{_quote(db)}/_index/{_quote(ddoc_name)}/json/{_quote(name)}")

    def nouveau_search(self, db: str, ddoc: str, index: str, query: str, **options: Any) -> JSONDict:
        body: JSONDict = {"q": query, **{k: v for k, v in options.items() if v is not None}}
        return self.request("POST", f"/{_quote(db)}/_design/{_quote(ddoc)}/_nouveau/{_quote(index)}", body=body)

    # partitions

    def partition_info(self, db: str, partition: str) -> JSONDict:
        return self.request("GET", f"/{_quote(db)}/_partition/{_quote(partition)}")

    def partition_docs(
        self,
        db: str,
        partition: str,
        *,
        limit: int | None = None,
        skip: int | None = None,
        descending: bool = False,
        include_docs: bool = False,
    ) -> JSONDict:
        params = _view_params(limit=limit, skip=skip, descending=descending, include_docs=include_docs)
        return self.request("GET", f"/{_quote(db)}/_partition/{_quote(partition)}/_all_docs", params=params)

    def query_partition_view(self, db: str, partition: str, ddoc: str, view: str, **options: Any) -> JSONDict:
        path = f"/{_quote(db)}/_partition/{_quote(partition)}/_design/{_quote(ddoc)}/_view/{_quote(view)}"
        return self.request("GET", path, params=_view_params(**options))

    def partition_find(self, db: str, partition: str, query: JSONDict) -> JSONDict:
        return self.request("POST", f"/{_quote(db)}/_partition/{_quote(partition)}/_find", body=query)

    # replication

    def replicate(self, source: str, target: str, **options: Any) -> JSONDict:
        body: JSONDict = {"source": source, "target": target}
        body.update({k: v for k, v in options.items() if v is not None and v is not False})
        return self.request("POST", "/_replicate", body=body)

    def list_replication_jobs(self) -> JSONDict:
        return self.all_docs("_replicator", include_docs=True)

    def get_replication_job(self, job_id: str) -> JSONDict:
        return self.get_document("_replicator", job_id)

    def create_replication_job(self, job: JSONDict) -> JSONDict:
        return self.put_document("_replicator", job)

    def delete_replication_job(self, job_id: str, rev: str) -> JSONDict:
        return self.delete_document("_replicator", job_id, rev)

    def replication_tasks(self) -> list[JSONDict]:
        return [task for task in self.active_tasks() if task.get("type") == "replication"]
