"""Client for the billing endpoints."""

import logging
from pathlib import Path

from bar_ordering_client.models.bill_models import Bill, bill_pdf_filename
from bar_ordering_client.observability import traced
from bar_ordering_client.services.backend_client import BackendClient, path_segment

logger = logging.getLogger(__name__)


class BillServiceClient:
    """Generates bills and fetches their PDFs.

    Totals are computed by the backend; this client only requests and
    downloads them.
    """

    def __init__(self, backend: BackendClient) -> None:
        self.backend = backend

    @traced("bills.list_bills")
    async def list_bills(self) -> list[Bill]:
        data = await self.backend.get("bill/all")
        return [Bill.from_api_payload(item) for item in data or []]

    @traced("bills.generate_for_table")
    async def generate_for_table(self, table_number: int, client_name: str) -> Bill:
        data = await self.backend.post(
            f"bill/save/by-table/{table_number}/{path_segment(client_name)}"
        )
        return Bill.from_api_payload(data)

    @traced("bills.generate_for_client")
    async def generate_for_client(self, client_name: str) -> Bill:
        data = await self.backend.post(f"bill/save/by-client/{path_segment(client_name)}")
        return Bill.from_api_payload(data)

    @traced("bills.generate_for_orders")
    async def generate_for_orders(self, order_ids: list[int]) -> Bill:
        """Bill an explicit selection of orders.

        Args:
            order_ids: Orders to include

        Returns:
            The generated bill

        Raises:
            ValueError: If no order ids are given
        """
        if not order_ids:
            raise ValueError("At least one order must be selected")

        data = await self.backend.post("bill/save/by-selection", json={"ordersId": order_ids})
        return Bill.from_api_payload(data)

    @traced("bills.download_pdf")
    async def download_pdf(self, bill_id: int) -> bytes:
        return await self.backend.get_bytes(f"bill/download-pdf/{bill_id}")

    async def save_pdf(self, bill_id: int, directory: Path | str) -> Path:
        """Download a bill PDF into ``directory`` as ``factura_{id}.pdf``.

        Args:
            bill_id: Bill to download
            directory: Target directory, created if missing

        Returns:
            Path of the written file
        """
        content = await self.download_pdf(bill_id)

        target_dir = Path(directory)
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / bill_pdf_filename(bill_id)
        target.write_bytes(content)

        logger.info(f"Saved bill {bill_id} to {target}")
        return target
