class InternalURIs:
    API = "/api"
    EXPORT = API + "/export/{namespace_id}"
    IMPORT = API + "/import/{namespace_id}"
    JOBS = API + "/jobs"
    JOB = JOBS + "/{job_id}"
    SEARCH = API + "/search"
    METADATA = API + "/metadata/{namespace_id}/{key_name:path}"
    BULK_TAG = API + "/metadata/{namespace_id}/bulk-tag"
    BULK_DELETE = API + "/keys/{namespace_id}/bulk-delete"
    AUDIT = API + "/audit/{namespace_id}"


class ExternalURIs:
    KV_NAMESPACE = "/accounts/{account_id}/storage/kv/namespaces/{namespace_id}"
    KV_KEYS = KV_NAMESPACE + "/keys"
    KV_VALUE = KV_NAMESPACE + "/values/{key_name}"
    KV_BULK = KV_NAMESPACE + "/bulk"
    KV_BULK_DELETE = KV_BULK + "/delete"
