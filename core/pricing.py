# =============================================================================
# core/pricing.py - Service Catalog & Contract Quote
# =============================================================================
# The services a client can pick on step 2, and the quote shown on step 5.
#
# Quote rules:
# - Setup fee starts at BASE_SETUP_FEE
# - managed-it is billed per employee, using the company size bucket
# - network-setup is quoted separately and adds nothing here
# =============================================================================

from dataclasses import dataclass, field

from core.models.onboarding import ContractDetails

BASE_SETUP_FEE = 500

# Employee count assumed for each company size bucket
EMPLOYEE_COUNTS: dict[str, int] = {
    "1-10 employees": 10,
    "11-50 employees": 50,
    "51-200 employees": 200,
    "201-500 employees": 500,
    "500+ employees": 1000,
}
DEFAULT_EMPLOYEE_COUNT = 10

INDUSTRIES = [
    "Healthcare", "Finance", "Manufacturing", "Retail", "Education",
    "Legal", "Real Estate", "Non-profit", "Technology", "Other",
]

COMPANY_SIZES = list(EMPLOYEE_COUNTS)


@dataclass(frozen=True)
class Service:
    """One entry of the service catalog."""
    id: str
    title: str
    description: str
    price: str
    monthly_fee: int = 0
    setup_fee: int = 0
    per_employee: bool = False
    features: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "features": list(self.features),
            "price": self.price,
        }


SERVICE_CATALOG: dict[str, Service] = {
    s.id: s
    for s in [
        Service(
            id="managed-it",
            title="Managed IT Services",
            description="Complete IT infrastructure management and support",
            features=["24/7 monitoring", "Help desk support", "System maintenance"],
            price="$150/month per user",
            monthly_fee=150,
            per_employee=True,
        ),
        Service(
            id="cybersecurity",
            title="Cybersecurity Solutions",
            description="Comprehensive security protection for your business",
            features=["Threat monitoring", "Firewall management", "Security training"],
            price="$200/month base",
            monthly_fee=200,
            setup_fee=300,
        ),
        Service(
            id="cloud-services",
            title="Cloud Migration & Management",
            description="Move to the cloud with expert guidance and ongoing support",
            features=["Cloud strategy", "Migration planning", "Ongoing optimization"],
            price="Custom pricing",
            monthly_fee=300,
            setup_fee=1000,
        ),
        Service(
            id="network-setup",
            title="Network Setup & Optimization",
            description="Design and implement robust network infrastructure",
            features=["Network design", "Hardware installation", "Performance optimization"],
            price="$2,500+ one-time",
        ),
        Service(
            id="backup-recovery",
            title="Backup & Disaster Recovery",
            description="Protect your data with automated backup solutions",
            features=["Automated backups", "Disaster recovery planning", "Data restoration"],
            price="$100/month base",
            monthly_fee=100,
        ),
        Service(
            id="server-management",
            title="Server Management",
            description="Professional server setup, maintenance, and monitoring",
            features=["Server installation", "Performance monitoring", "Updates & patches"],
            price="$300/month per server",
            monthly_fee=300,
        ),
    ]
}


def unknown_services(service_ids: list[str]) -> list[str]:
    """Ids in `service_ids` that aren't in the catalog, in input order."""
    return [sid for sid in service_ids if sid not in SERVICE_CATALOG]


def employee_count(company_size: str | None) -> int:
    """Employees assumed for a company size bucket."""
    return EMPLOYEE_COUNTS.get(company_size or "", DEFAULT_EMPLOYEE_COUNT)


def quote_contract(selected_services: list[str], company_size: str | None) -> ContractDetails:
    """
    Price the selected services.

    Args:
        selected_services: Catalog ids chosen on step 2
        company_size: Size bucket from step 1

    Returns:
        ContractDetails with fees and the standard Business service level

    Example:
        quote_contract(["cybersecurity"], "1-10 employees")
        # monthly_fee=200, setup_fee=800
    """
    monthly_fee = 0
    setup_fee = BASE_SETUP_FEE

    for service_id in selected_services:
        service = SERVICE_CATALOG.get(service_id)
        if service is None:
            continue
        if service.per_employee:
            monthly_fee += service.monthly_fee * employee_count(company_size)
        else:
            monthly_fee += service.monthly_fee
        setup_fee += service.setup_fee

    return ContractDetails(
        service_level="Business",
        support_hours="24/7",
        response_time="4 hours",
        monthly_fee=monthly_fee,
        setup_fee=setup_fee,
    )
