from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from recordmapper import DatabaseEngine, DatabaseSettings, Repository

from models import Customer, Product, Purchase, Invoice

from endpoints.schema_endpoints import router as schema_router
from endpoints.purchases_endpoints import router as purchases_router


app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

engine = DatabaseEngine(DatabaseSettings.from_env())
repository = Repository(engine, tables=[Customer, Product, Purchase, Invoice])
repository.create_tables()
app.state.repository = repository

app.include_router(schema_router)
app.include_router(purchases_router)
