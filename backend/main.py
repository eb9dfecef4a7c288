import logging
from datetime import datetime, timezone
from typing import List, Optional, Union

from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from charts import render_series
from config import Settings, load_settings
from errors import IngestionError
from ingest import describe_upload, detect_format, ingest, summarize
from schemas import (
    ChartRequest,
    ChartResponse,
    DatasetListItem,
    DatasetSummary,
    UploadPlaceholder,
    UploadResponse,
)
from store import DatasetStore

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(title="DataDash API", version="1.0.0")
    app.state.settings = settings
    app.state.store = DatasetStore()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(IngestionError)
    async def ingestion_error_handler(request: Request, exc: IngestionError) -> JSONResponse:
        logger.warning("Upload rejected (%s): %s", exc.code, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": {"code": exc.code, "message": exc.message}},
        )

    _register_routes(app)
    return app


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> DatasetStore:
    return request.app.state.store


def _register_routes(app: FastAPI) -> None:
    @app.get("/test")
    async def test(store: DatasetStore = Depends(get_store)):
        return {"status": "ok", "datasets": len(store)}

    @app.post("/upload", response_model=Union[UploadResponse, UploadPlaceholder])
    async def upload_dataset(
        file: UploadFile = File(...),
        store: DatasetStore = Depends(get_store),
        settings: Settings = Depends(get_settings),
    ):
        filename = file.filename or "uploaded_file"
        content = await file.read()
        if len(content) > settings.max_upload_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File exceeds the {settings.max_upload_bytes} byte upload limit",
            )
        uploaded_at = datetime.now(timezone.utc)

        if detect_format(filename, file.content_type) == "excel":
            meta = describe_upload(filename, len(content), file.content_type)
            return UploadPlaceholder(uploaded_at=uploaded_at, **meta)

        dataset = ingest(filename, file.content_type, content, settings)
        dataset_id = store.add(dataset)
        return UploadResponse(
            dataset_id=dataset_id,
            name=dataset.name,
            source_kind=dataset.source_kind,
            row_count=dataset.row_count,
            column_count=dataset.column_count,
            columns=list(dataset.columns),
            size=len(content),
            uploaded_at=uploaded_at,
        )

    @app.get("/datasets", response_model=List[DatasetListItem])
    async def list_datasets(store: DatasetStore = Depends(get_store)):
        return [
            DatasetListItem(
                dataset_id=dataset_id,
                name=ds.name,
                row_count=ds.row_count,
                column_count=ds.column_count,
            )
            for dataset_id, ds in store.items()
        ]

    @app.get("/datasets/{dataset_id}", response_model=DatasetSummary)
    async def dataset_summary(
        dataset_id: str,
        store: DatasetStore = Depends(get_store),
        settings: Settings = Depends(get_settings),
    ):
        dataset = store.get(dataset_id)
        if dataset is None:
            raise HTTPException(status_code=404, detail="Dataset not found")
        return summarize(dataset, sample_rows=settings.summary_sample_rows)

    @app.delete("/datasets/{dataset_id}")
    async def delete_dataset(dataset_id: str, store: DatasetStore = Depends(get_store)):
        if not store.remove(dataset_id):
            raise HTTPException(status_code=404, detail="Dataset not found")
        return {"deleted": dataset_id}

    @app.post("/datasets/{dataset_id}/chart", response_model=ChartResponse)
    async def chart_series(
        dataset_id: str,
        req: ChartRequest,
        store: DatasetStore = Depends(get_store),
        settings: Settings = Depends(get_settings),
    ):
        dataset = store.get(dataset_id)
        if dataset is None:
            raise HTTPException(status_code=404, detail="Dataset not found")
        points = render_series(
            dataset,
            req,
            bins=settings.histogram_bins,
            max_groups=settings.chart_max_groups,
        )
        return ChartResponse(kind=req.kind, points=points)


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
