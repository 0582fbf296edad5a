from typing import List

from fastapi import FastAPI, File, HTTPException, UploadFile
from starlette.concurrency import run_in_threadpool

from .log import setup_logging, get_logger
from .intake.files import UploadedFile, guess_mime_type, is_accepted
from .pipeline.run import pipeline
from .errors import AnalysisInProgressError, IntakeReadError, AnalysisError, USER_RETRY_MESSAGE

setup_logging()
logger = get_logger("api")

app = FastAPI(title="Chat Compatibility Analyzer")


async def _to_uploaded_file(upload: UploadFile) -> UploadedFile:
    name = upload.filename or "upload"
    try:
        data = await upload.read()
    except OSError as e:
        raise IntakeReadError(name, str(e)) from e
    return UploadedFile.from_bytes(name, data, mime_type=upload.content_type or guess_mime_type(name))


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/analyze")
async def analyze(files: List[UploadFile] = File(default=[])):
    if not files:
        raise HTTPException(status_code=400, detail="No files uploaded")

    try:
        uploaded = [await _to_uploaded_file(f) for f in files]
    except IntakeReadError as e:
        logger.error(f"Upload read failed [{e.kind}]: {e}")
        raise HTTPException(status_code=400, detail=USER_RETRY_MESSAGE)

    # 1. Acceptance filter
    accepted = [f for f in uploaded if is_accepted(f)]
    if len(accepted) < len(uploaded):
        logger.info(f"Ignoring {len(uploaded) - len(accepted)} unsupported upload(s)")

    # 2. Run the pipeline off the event loop
    try:
        result = await run_in_threadpool(pipeline.analyze_files, accepted)
    except AnalysisInProgressError:
        raise HTTPException(status_code=409, detail="An analysis is already running. Please wait for it to finish.")
    except IntakeReadError:
        raise HTTPException(status_code=400, detail=USER_RETRY_MESSAGE)
    except AnalysisError:
        raise HTTPException(status_code=502, detail=USER_RETRY_MESSAGE)
    except Exception:
        logger.exception("Unexpected error during analysis")
        raise HTTPException(status_code=500, detail=USER_RETRY_MESSAGE)

    return result.to_payload()
