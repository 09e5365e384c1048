from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
import logging

from slowverb.core.errors import DecodeError, ParameterError, RenderError, SessionStateError
from slowverb.export.exporter import DEFAULT_EXPORT_NAME, WAV_MIME_TYPE
from slowverb.params.schema import PARAM_SCHEMA
from slowverb.processor import AudioProcessor

# Configure Logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("slowverb")

app = FastAPI(
    title="Slowverb Engine",
    version="1.0.0",
    description="Speed/pitch + reverb preview and export",
)

# CORS (Allow Frontend)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow any local port
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_processor: Optional[AudioProcessor] = None


def get_processor() -> AudioProcessor:
    """One processor (and output device) per server process."""
    global _processor
    if _processor is None:
        _processor = AudioProcessor()
    return _processor


@app.on_event("shutdown")
def release_processor():
    global _processor
    if _processor is not None:
        _processor.close()
        _processor = None


def _state(processor: AudioProcessor) -> dict:
    buffer = processor.buffer
    return {
        "state": processor.state.value,
        "position": processor.session.position(),
        "speed": processor.params.speed,
        "wetness": processor.params.wetness,
        "loaded": buffer is not None,
        "duration": buffer.duration if buffer is not None else None,
    }


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "slowverb-engine"}


@app.get("/params/schema")
async def params_schema():
    return PARAM_SCHEMA


@app.post("/load")
async def load(request: Request, container: Optional[str] = None, processor: AudioProcessor = Depends(get_processor)):
    """
    Loads an audio file sent as the raw request body.
    Returns the decoded format.
    """
    data = await request.body()
    try:
        buffer = processor.load_file(data, container)
    except DecodeError as e:
        raise HTTPException(status_code=415, detail=str(e))
    return {
        "channels": buffer.channels,
        "sample_rate": buffer.sample_rate,
        "frames": buffer.frame_count,
        "duration": buffer.duration,
    }


@app.post("/play")
async def play(processor: AudioProcessor = Depends(get_processor)):
    try:
        processor.play()
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _state(processor)


@app.post("/stop")
async def stop(processor: AudioProcessor = Depends(get_processor)):
    processor.stop()
    return _state(processor)


@app.post("/params")
async def set_params(params: dict, processor: AudioProcessor = Depends(get_processor)):
    """
    Updates speed and/or wetness: { speed?, wetness? }.
    Applied live when playing, stored for the next play otherwise.
    """
    try:
        processor.set_params(**params)
    except ParameterError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _state(processor)


@app.get("/state")
async def state(processor: AudioProcessor = Depends(get_processor)):
    return _state(processor)


@app.get("/export")
async def export(processor: AudioProcessor = Depends(get_processor)):
    """
    Renders the loaded file offline with the current params and returns a WAV.
    """
    try:
        wav_bytes = processor.export_to_bytes()
    except RenderError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return Response(
        content=wav_bytes,
        media_type=WAV_MIME_TYPE,
        headers={"Content-Disposition": f"attachment; filename={DEFAULT_EXPORT_NAME}"},
    )


if __name__ == "__main__":
    uvicorn.run("slowverb.main:app", host="0.0.0.0", port=8000, reload=True)
