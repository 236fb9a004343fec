"""Local Parquet write path.

Stands in for the dataset layer's output format when running outside the
batch framework (CLI, tests). Records are buffered and written in row
groups with pyarrow; the Parquet encoding itself is entirely pyarrow's.
"""

import os
from typing import Any, Dict, List, Optional

import pyarrow as pa
import pyarrow.parquet as pq

from parquet_sink.canonical.schema import CanonicalSchema
from parquet_sink.observability.logger import log_event
from parquet_sink.outputs.arrow_schema import to_arrow_schema
from parquet_sink.pipeline.compression import CompressionCodec
from parquet_sink.utils.exceptions import ConfigError


# pyarrow cannot write LZO
_PYARROW_CODECS = {
    CompressionCodec.NONE: "none",
    CompressionCodec.SNAPPY: "snappy",
    CompressionCodec.GZIP: "gzip",
    CompressionCodec.BROTLI: "brotli",
    CompressionCodec.LZ4: "lz4",
    CompressionCodec.ZSTD: "zstd",
}


class LocalParquetWriter:
    """Writes transformed (Avro generic) records to one Parquet file."""

    def __init__(
        self,
        path: str,
        schema: CanonicalSchema,
        codec: CompressionCodec = CompressionCodec.NONE,
        row_group_size: int = 1000,
    ):
        if codec not in _PYARROW_CODECS:
            raise ConfigError(
                f"Compression codec '{codec.value}' is not supported by the local Parquet writer"
            )
        self.path = path
        self.codec = codec
        self.row_group_size = row_group_size
        self.arrow_schema = to_arrow_schema(schema)

        self._buffer: List[Dict[str, Any]] = []
        self._writer: Optional[pq.ParquetWriter] = None
        self._closed = False
        self.rows_written = 0

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.close()
        else:
            self.abort()

    def write(self, record: Dict[str, Any]) -> None:
        self._buffer.append(record)
        if len(self._buffer) >= self.row_group_size:
            self.flush()

    def flush(self) -> None:
        if not self._buffer:
            return
        if self._writer is None:
            self._ensure_parent()
            self._writer = pq.ParquetWriter(
                self.path,
                self.arrow_schema,
                compression=_PYARROW_CODECS[self.codec],
            )

        table = pa.Table.from_pylist(self._buffer, schema=self.arrow_schema)
        self._writer.write_table(table)
        self.rows_written += len(self._buffer)
        self._buffer = []

    def _ensure_parent(self) -> None:
        parent = os.path.dirname(self.path)
        if parent:
            os.makedirs(parent, exist_ok=True)

    def close(self) -> int:
        if self._closed:
            return self.rows_written
        self._closed = True

        try:
            self.flush()
        finally:
            self._close_writer()

        if self.rows_written == 0:
            self._ensure_parent()
            # No rows: still produce a readable (empty) file
            pq.write_table(
                self.arrow_schema.empty_table(),
                self.path,
                compression=_PYARROW_CODECS[self.codec],
            )

        log_event("PARQUET_WRITE_COMPLETED", {
            "path": self.path,
            "rows": self.rows_written,
            "compression": self.codec.value,
        })
        return self.rows_written

    def abort(self) -> None:
        """
        Discard the output: buffered rows are dropped and any partially
        written file is removed.
        """
        if self._closed:
            return
        self._closed = True
        self._buffer = []

        started = self._close_writer()
        if started and os.path.exists(self.path):
            os.remove(self.path)

        log_event("PARQUET_WRITE_ABORTED", {
            "path": self.path,
            "rows_discarded": self.rows_written,
        })
        self.rows_written = 0

    def _close_writer(self) -> bool:
        if self._writer is None:
            return False
        self._writer.close()
        self._writer = None
        return True
