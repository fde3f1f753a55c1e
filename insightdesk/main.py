from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from insightdesk.api.routers.profile import router as profile_router

app = FastAPI(title="insightdesk API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # For development; restrict to the web app origin in production
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(profile_router)


@app.get("/health")
def health():
    return {"status": "up"}
