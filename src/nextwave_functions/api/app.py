import logging

from fastapi import APIRouter, FastAPI, Request, Response

from nextwave_functions.api.schemas import CheckoutResponse, ContactResponse, ErrorResponse, GenerateBlogResponse
from nextwave_functions.service.blog import BlogService
from nextwave_functions.service.checkout import CheckoutService
from nextwave_functions.service.contact import ContactService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

# Handlers see every method so that OPTIONS and 405 responses carry CORS headers.
FUNCTION_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
ERROR_RESPONSES = {status: {"model": ErrorResponse} for status in (400, 401, 405, 429, 500, 502, 503, 504)}

app = FastAPI(title="nextwave-functions", version="0.1.0")
functions = APIRouter(prefix="/functions/v1")
blog_service = BlogService()
contact_service = ContactService()
checkout_service = CheckoutService()


@app.get("/healthz")
async def healthz() -> dict:
    return {"status": "ok"}


@functions.api_route(
    "/generate-blog",
    methods=FUNCTION_METHODS,
    responses={200: {"model": GenerateBlogResponse}, **ERROR_RESPONSES},
)
async def generate_blog(request: Request) -> Response:
    result = await blog_service.handle(request.method, request.headers, await request.body())
    return result.to_fastapi()


@functions.api_route(
    "/send-email",
    methods=FUNCTION_METHODS,
    responses={200: {"model": ContactResponse}, **ERROR_RESPONSES},
)
async def send_email(request: Request) -> Response:
    result = await contact_service.handle(request.method, request.headers, await request.body())
    return result.to_fastapi()


@functions.api_route(
    "/create-checkout",
    methods=FUNCTION_METHODS,
    responses={200: {"model": CheckoutResponse}, **ERROR_RESPONSES},
)
async def create_checkout(request: Request) -> Response:
    result = await checkout_service.handle(request.method, request.headers, await request.body())
    return result.to_fastapi()


app.include_router(functions)
