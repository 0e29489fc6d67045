from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/")
async def health(request: Request):
    engine = request.app.state.dispatcher.engine
    return {
        "status": "ok",
        "message": "Relief Bot Running",
        "flow": engine.flow.name,
        "active_sessions": len(engine.store),
    }
