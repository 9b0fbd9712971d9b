from prismic_source.api.client import ContentApiError, PrismicClient, create_http_client, id_predicate
from prismic_source.api.media import RemoteFileMaterializer, file_node_key
from prismic_source.api.paging import fetch_all_documents

__all__ = [
    "ContentApiError",
    "PrismicClient",
    "RemoteFileMaterializer",
    "create_http_client",
    "fetch_all_documents",
    "file_node_key",
    "id_predicate",
]
