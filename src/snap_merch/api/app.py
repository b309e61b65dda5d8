"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager

from fastapi import FastAPI, Header, HTTPException, Request, status

from snap_merch.api.models import (
    CaptureRequest,
    GenerateSelectedRequest,
    IdentityRequest,
    MockupRequest,
    OrderRequest,
    TweakRequest,
)
from snap_merch.app_logging import configure_logging
from snap_merch.containers import AppContainer
from snap_merch.domain.sessions import (
    CarSession,
    EventSession,
    GeneratedStyle,
    MockupResult,
    Order,
)
from snap_merch.domain.styles import StyleConfig
from snap_merch.services.images import is_data_url
from snap_merch.services.pricing import UnknownProductError
from snap_merch.services.studio import (
    CaptureResult,
    CarNotFoundError,
    ColorIdentificationError,
    DesignUnavailableError,
    GenerationReport,
    MissingIdentityError,
    PhotoUnavailableError,
    StyleAlreadyGeneratingError,
    UnknownStyleError,
)


@contextmanager
def _domain_errors() -> Iterator[None]:
    """Translate studio errors into HTTP responses."""
    try:
        yield
    except CarNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown car: {exc}"
        ) from exc
    except StyleAlreadyGeneratingError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Style {exc} is already generating",
        ) from exc
    except UnknownStyleError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown style: {exc}"
        ) from exc
    except (
        UnknownProductError,
        MissingIdentityError,
        DesignUnavailableError,
        PhotoUnavailableError,
    ) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    except ColorIdentificationError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Color identification failed: {exc}",
        ) from exc


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.container.sync_queue.start()
        yield
        try:
            await app.state.container.close_resources()
        except Exception:
            logger.exception("Failed to close resources")

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/event")
    async def current_event(
        request: Request, x_user_id: str | None = Header(default=None)
    ) -> EventSession:
        """Return today's event session, starting a new one on rollover."""
        state_container: AppContainer = request.app.state.container
        return state_container.event_store.get_event_session(x_user_id)

    @app.post("/event/hydrate")
    async def hydrate_event(
        request: Request, x_user_id: str | None = Header(default=None)
    ) -> EventSession:
        """Restore today's event from the remote mirror."""
        if not x_user_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="X-User-Id header is required",
            )
        state_container: AppContainer = request.app.state.container
        session = await state_container.event_store.hydrate(x_user_id)
        if session is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No remote event for today",
            )
        return session

    @app.post("/cars", status_code=status.HTTP_201_CREATED)
    async def capture_car(
        body: CaptureRequest,
        request: Request,
        x_user_id: str | None = Header(default=None),
    ) -> CaptureResult:
        """Create a car session from a photo and identify the vehicle."""
        state_container: AppContainer = request.app.state.container
        image = body.image_base64
        if not is_data_url(image):
            image = f"data:image/jpeg;base64,{image}"
        result = await state_container.studio_service.capture_car(image, x_user_id)
        logger.info("Captured car %s", result.car.id)
        return result

    @app.get("/cars/{car_id}")
    async def get_car(
        car_id: str, request: Request, x_user_id: str | None = Header(default=None)
    ) -> CarSession:
        state_container: AppContainer = request.app.state.container
        with _domain_errors():
            return state_container.studio_service.get_car(car_id, x_user_id)

    @app.get("/cars/{car_id}/styles/ranked")
    async def ranked_styles(
        car_id: str, request: Request, x_user_id: str | None = Header(default=None)
    ) -> list[StyleConfig]:
        """Return the full catalog ordered for this vehicle."""
        state_container: AppContainer = request.app.state.container
        with _domain_errors():
            return state_container.studio_service.ranked_styles(car_id, x_user_id)

    @app.put("/cars/{car_id}/identity")
    async def update_identity(
        car_id: str,
        body: IdentityRequest,
        request: Request,
        x_user_id: str | None = Header(default=None),
    ) -> CarSession:
        """Replace the vehicle identity after vendor review."""
        state_container: AppContainer = request.app.state.container
        with _domain_errors():
            return state_container.studio_service.update_identity(
                car_id, body.to_identity(), x_user_id
            )

    @app.post("/cars/{car_id}/generate")
    async def generate(
        car_id: str, request: Request, x_user_id: str | None = Header(default=None)
    ) -> GenerationReport:
        """Generate the initial batch of top-ranked styles."""
        state_container: AppContainer = request.app.state.container
        with _domain_errors():
            return await state_container.studio_service.start_generation(
                car_id, x_user_id
            )

    @app.post("/cars/{car_id}/generate-more")
    async def generate_more(
        car_id: str, request: Request, x_user_id: str | None = Header(default=None)
    ) -> GenerationReport:
        """Generate the next batch in ranked order."""
        state_container: AppContainer = request.app.state.container
        with _domain_errors():
            return await state_container.studio_service.generate_more(
                car_id, x_user_id
            )

    @app.post("/cars/{car_id}/generate-selected")
    async def generate_selected(
        car_id: str,
        body: GenerateSelectedRequest,
        request: Request,
        x_user_id: str | None = Header(default=None),
    ) -> GenerationReport:
        """Generate or regenerate the chosen styles."""
        state_container: AppContainer = request.app.state.container
        with _domain_errors():
            return await state_container.studio_service.generate_selected(
                car_id, body.style_ids, x_user_id
            )

    @app.post("/cars/{car_id}/styles/{style_id}/tweak")
    async def tweak_style(  # noqa: PLR0913
        car_id: str,
        style_id: str,
        body: TweakRequest,
        request: Request,
        x_user_id: str | None = Header(default=None),
    ) -> GeneratedStyle:
        """Edit a finished design with a free-text instruction."""
        state_container: AppContainer = request.app.state.container
        with _domain_errors():
            return await state_container.studio_service.tweak_style(
                car_id, style_id, body.instruction, x_user_id
            )

    @app.post("/cars/{car_id}/color")
    async def identify_color(
        car_id: str, request: Request, x_user_id: str | None = Header(default=None)
    ) -> CarSession:
        """Re-identify the paint color for the vendor-confirmed vehicle."""
        state_container: AppContainer = request.app.state.container
        with _domain_errors():
            return await state_container.studio_service.identify_color(
                car_id, x_user_id
            )

    @app.post("/cars/{car_id}/mockups")
    async def create_mockup(
        car_id: str,
        body: MockupRequest,
        request: Request,
        x_user_id: str | None = Header(default=None),
    ) -> MockupResult:
        """Render a product mockup for a finished design."""
        state_container: AppContainer = request.app.state.container
        with _domain_errors():
            return await state_container.studio_service.create_mockup(
                car_id,
                body.style_id,
                body.product_id,
                color_name=body.color,
                user_id=x_user_id,
            )

    @app.post("/cars/{car_id}/orders", status_code=status.HTTP_201_CREATED)
    async def place_order(
        car_id: str,
        body: OrderRequest,
        request: Request,
        x_user_id: str | None = Header(default=None),
    ) -> Order:
        """Record an order for merchandise printed with a car's artwork."""
        state_container: AppContainer = request.app.state.container
        with _domain_errors():
            order = state_container.studio_service.place_order(
                car_id,
                [item.model_dump() for item in body.items],
                customer_email=body.customer_email,
                customer_name=body.customer_name,
                customer_phone=body.customer_phone,
                shipping_address=(
                    body.shipping_address.to_domain()
                    if body.shipping_address
                    else None
                ),
                payment_id=body.payment_id,
                user_id=x_user_id,
            )
        logger.info("Order %s placed for car %s", order.id, car_id)
        return order

    @app.get("/orders")
    async def list_orders(
        request: Request, x_user_id: str | None = Header(default=None)
    ) -> list[Order]:
        state_container: AppContainer = request.app.state.container
        return state_container.event_store.get_orders(x_user_id)

    return app
