"""JSON-ready views of snapshots and query results, shared by both transports."""

from datetime import datetime, timezone
from typing import Any

from pagegraph.core.models import ConnectionReport, Project, SearchResponse, ThemeReport


def isoformat_timestamp(timestamp: int) -> str:
    """ISO 8601 UTC string, or "" when the timestamp is out of range."""
    try:
        return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()
    except (OverflowError, OSError, ValueError):
        return ""


def project_summary(project: Project) -> dict[str, Any]:
    return {
        "name": project.name,
        "displayName": project.display_name,
        "description": project.description,
        "lastUpdated": project.last_updated.isoformat(),
        "pageCount": project.page_count,
    }


def page_list(project: Project) -> list[dict[str, Any]]:
    return [
        {
            "title": page.title,
            "created": isoformat_timestamp(page.created),
            "updated": isoformat_timestamp(page.updated),
            "tags": list(page.tags),
            "wordCount": page.metadata.word_count,
            "creativeType": page.metadata.creative_type,
        }
        for page in project.pages
    ]


def tag_list(project: Project, page_limit: int) -> list[dict[str, Any]]:
    return [
        {"tag": tag, "pageCount": len(titles), "pages": list(titles[:page_limit])}
        for tag, titles in project.tag_index.items()
    ]


def search_results(response: SearchResponse, context_lines: int) -> dict[str, Any]:
    return {
        "query": response.query,
        "totalResults": response.total_results,
        "results": [
            {
                "title": hit.page.title,
                "relevanceScore": hit.relevance_score,
                "tags": list(hit.page.tags),
                "creativeType": hit.page.metadata.creative_type,
                "context": hit.matched_context[:context_lines],
                "wordCount": hit.page.metadata.word_count,
            }
            for hit in response.results
        ],
    }


def connection_results(report: ConnectionReport, limit: int) -> dict[str, Any]:
    """Cap the edge list without re-sorting; the total stays uncapped."""
    return {
        "sourcePage": report.source_page,
        "totalConnections": report.total_connections,
        "connections": [
            connection.model_dump(by_alias=True) for connection in report.connections[:limit]
        ],
    }


def theme_results(report: ThemeReport) -> dict[str, Any]:
    return report.model_dump(by_alias=True)


def link_graph(project: Project) -> dict[str, Any]:
    """Nodes and outgoing-link edges for graph visualization."""
    nodes = [{"id": page.title} for page in project.pages]
    links = [
        {"source": page.title, "target": target}
        for page in project.pages
        for target in page.links
    ]
    return {"nodes": nodes, "links": links}
