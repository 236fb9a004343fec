from fastapi import FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder

from parquet_sink.pipeline.sink_config import RawSinkConfig
from parquet_sink.sinks.registry import SinkRegistry
from parquet_sink.utils.exceptions import ConfigError, TransformError

app = FastAPI(
    title="Snapshot Parquet Sink",
    version="1.0.0"
)


def _build_sink(payload: dict):
    sink_cls = SinkRegistry.get_sink(payload.get("plugin", SinkRegistry.DEFAULT_PLUGIN))
    config = RawSinkConfig.from_dict(payload).resolve(payload.get("arguments") or {})
    return sink_cls(config)


def _config_error(e: ConfigError) -> HTTPException:
    # Configuration problems are client errors, never retried
    return HTTPException(
        status_code=400,
        detail={
            "status": "ERROR",
            "error_type": type(e).__name__,
            "message": str(e),
        }
    )


@app.post("/sinks/configure")
def configure_sink(payload: dict):
    try:
        sink = _build_sink(payload)
        return {"status": "SUCCESS", "properties": sink.configure()}
    except ConfigError as e:
        raise _config_error(e)


@app.post("/sinks/transform")
def transform_records(payload: dict):
    records = payload.get("records") or []
    if not isinstance(records, list):
        raise HTTPException(status_code=400, detail={"status": "ERROR", "message": "'records' must be a list"})

    try:
        sink = _build_sink(payload)
        sink.initialize()
    except ConfigError as e:
        raise _config_error(e)

    try:
        transformed = [sink.transform(record) for record in records]
    except TransformError as e:
        raise HTTPException(
            status_code=422,
            detail={
                "status": "ERROR",
                "error_type": "TransformError",
                "field": e.field,
                "message": str(e),
            }
        )

    return {"status": "SUCCESS", "records": jsonable_encoder(transformed)}
