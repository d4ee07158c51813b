"""UploadService: one in-progress upload from file to created collection.

The session (headers, values, current mapping and scores) lives in the
cache between requests; the raw file lives in the file store so the create
step can re-stream it through the record transformer.
"""

from __future__ import annotations

import io
import logging
import uuid
from typing import Optional

from fieldmap.core.config import AppSettings
from fieldmap.core.exceptions import ParseError, UploadNotFoundError, ValidationError
from fieldmap.core.protocols import ICacheBackend, ICollectionStore, IFileStore
from fieldmap.ingest.reader import ingest, is_spreadsheet, iter_rows
from fieldmap.mapping.auto_mapper import AutoMapper
from fieldmap.mapping.editor import MappingEditor
from fieldmap.models.collection import Collection, CreateCollectionRequest
from fieldmap.models.taxonomy import Taxonomy
from fieldmap.models.upload import UploadSession, UploadView
from fieldmap.services.builder import CollectionBuilder, load_collection

logger = logging.getLogger(__name__)

CSV_CONTENT_TYPE = "text/csv"
XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class UploadService:
    """Upload → map → create, with state kept in the cache between steps."""

    def __init__(
        self,
        *,
        settings: AppSettings,
        taxonomy: Taxonomy,
        collection_store: ICollectionStore,
        cache: ICacheBackend,
        file_store: IFileStore,
    ) -> None:
        self._settings = settings
        self._taxonomy = taxonomy
        self._store = collection_store
        self._cache = cache
        self._files = file_store
        self._auto_mapper = AutoMapper(
            taxonomy,
            threshold=settings.mapping.auto_map_threshold,
            high_band=settings.mapping.high_band,
            medium_band=settings.mapping.medium_band,
        )
        self._builder = CollectionBuilder(
            collection_store,
            compensate=settings.persistence.compensate_on_failure,
            reject_conflicts=settings.mapping.reject_conflicts,
        )

    @property
    def taxonomy(self) -> Taxonomy:
        return self._taxonomy

    # ---- upload step ----

    def validate_upload(self, name: str, type: str, filename: Optional[str],
                        data: Optional[bytes]) -> None:
        if not name or not name.strip():
            raise ValidationError("Universe name is required")
        if not type or not type.strip():
            raise ValidationError("Universe type is required")
        if data is None or not filename:
            raise ValidationError("No file selected")
        limit = self._settings.ingest.max_upload_bytes
        if len(data) > limit:
            raise ValidationError(
                f"File size must be less than {limit // (1024 * 1024)}MB"
            )

    def start_upload(self, name: str, type: str, filename: Optional[str],
                     data: Optional[bytes]) -> UploadView:
        self.validate_upload(name, type, filename, data)

        upload_id = uuid.uuid4().hex
        file_key = f"uploads/{upload_id}/{filename}"
        content_type = XLSX_CONTENT_TYPE if is_spreadsheet(filename) else CSV_CONTENT_TYPE
        self._files.write(file_key, data, content_type=content_type)

        ingest_cfg = self._settings.ingest
        try:
            result = ingest(
                io.BytesIO(data),
                filename=filename,
                collect_values=ingest_cfg.collect_values,
                chunk_size=ingest_cfg.chunk_size,
                encoding=ingest_cfg.encoding,
                delimiter=ingest_cfg.delimiter,
            )
        except ParseError:
            self._files.delete(file_key)
            raise

        editor = self._new_editor(result.headers)
        editor.load_proposal(self._auto_mapper.map_headers(result.headers))

        session = UploadSession(
            upload_id=upload_id,
            name=name.strip(),
            type=type.strip(),
            filename=filename,
            file_key=file_key,
            size=len(data),
            headers=result.headers,
            record_count=result.record_count,
            column_values=result.column_values,
        )
        self._save(session, editor)
        logger.info(
            f"Started upload {upload_id} for '{session.name}': "
            f"{len(session.headers)} headers, {session.record_count} records"
        )
        return self._view(session, editor)

    # ---- mapping step ----

    def get_session(self, upload_id: str) -> UploadView:
        session = self._load(upload_id)
        return self._view(session, self._editor(session))

    def set_mapping(self, upload_id: str, header: str, target: Optional[str]) -> UploadView:
        session = self._load(upload_id)
        editor = self._editor(session)
        editor.set_mapping(header, target)
        self._save(session, editor)
        return self._view(session, editor)

    def reset_mapping(self, upload_id: str) -> UploadView:
        session = self._load(upload_id)
        editor = self._editor(session)
        editor.reset()
        self._save(session, editor)
        return self._view(session, editor)

    def auto_map(self, upload_id: str) -> UploadView:
        session = self._load(upload_id)
        editor = self._editor(session)
        editor.load_proposal(self._auto_mapper.map_headers(session.headers))
        self._save(session, editor)
        return self._view(session, editor)

    # ---- review/create step ----

    def create_collection(self, upload_id: str, *, compensate: Optional[bool] = None) -> Collection:
        session = self._load(upload_id)
        editor = self._editor(session)
        data = self._files.read(session.file_key)

        ingest_cfg = self._settings.ingest
        rows = iter_rows(
            io.BytesIO(data),
            filename=session.filename,
            chunk_size=ingest_cfg.chunk_size,
            encoding=ingest_cfg.encoding,
            delimiter=ingest_cfg.delimiter,
        )
        request = CreateCollectionRequest(
            name=session.name,
            type=session.type,
            record_count=session.record_count,
            mappings=editor.finalize(),
        )
        collection = self._builder.build(request, rows, compensate=compensate)

        self._cache.delete(self._key(upload_id))
        self._files.delete(session.file_key)
        return collection

    def get_collection(self, collection_id: str) -> Collection:
        return load_collection(self._store, collection_id)

    def ping(self) -> dict[str, bool]:
        """Reachability of each backend, keyed by role."""
        return {
            "collections": self._store.ping(),
            "cache": self._cache.ping(),
            "files": self._files.ping(),
        }

    # ---- helpers ----

    def _key(self, upload_id: str) -> str:
        return f"{self._settings.session.key_prefix}:{upload_id}"

    def _load(self, upload_id: str) -> UploadSession:
        raw = self._cache.get(self._key(upload_id))
        if raw is None:
            raise UploadNotFoundError(f"Upload {upload_id!r} not found or expired")
        return UploadSession.model_validate_json(raw)

    def _save(self, session: UploadSession, editor: MappingEditor) -> None:
        session.mapping = editor.finalize()
        session.scores = editor.scores()
        self._cache.setex(
            self._key(session.upload_id),
            self._settings.session.ttl_seconds,
            session.model_dump_json(),
        )

    def _new_editor(self, headers: list[str]) -> MappingEditor:
        return MappingEditor(
            self._taxonomy,
            headers=headers,
            high_band=self._settings.mapping.high_band,
            medium_band=self._settings.mapping.medium_band,
        )

    def _editor(self, session: UploadSession) -> MappingEditor:
        editor = self._new_editor(session.headers)
        editor.restore(session.mapping, session.scores)
        return editor

    def _view(self, session: UploadSession, editor: MappingEditor) -> UploadView:
        return UploadView(
            upload_id=session.upload_id,
            name=session.name,
            type=session.type,
            filename=session.filename,
            headers=session.headers,
            record_count=session.record_count,
            column_values=session.column_values,
            entries=list(editor.get_mapping().values()),
            unmapped_headers=editor.unmapped_headers(),
            unmapped_fields=editor.unmapped_fields(),
            conflicts=editor.conflicts(),
        )
