# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles
# (phones.client_id → clients, locations.phone_id → phones, BON1.phone_id → phones).

from app.models.account import Account  # noqa: F401 (doit précéder device)
from app.models.device import Device, LocationSample  # noqa: F401
from app.models.document import OrderHeader, OrderLine, SaleHeader, SaleLine  # noqa: F401
