"""
Database Schemas for the delivery records catalog

Each Pydantic model describes the documents of one MongoDB collection. Collection
bindings live in catalog.py; Vehicle, MileageLog, PharmacyForm and Pod are
schema-only and are stored wherever the caller points them.

Most business fields are free text: dates, prices and statuses are stored exactly
as the submitting forms send them.
"""
from bson import ObjectId
from pydantic import BaseModel, BeforeValidator, Field, EmailStr
from typing import Annotated, Optional, List, Literal, get_args
from datetime import datetime, timezone

Role = Literal["admin", "manager", "cs", "warehouse", "finance", "moh"]

ROLES = get_args(Role)


def utcnow():
    return datetime.now(timezone.utc)


def _object_id_str(value):
    if isinstance(value, ObjectId):
        return str(value)
    return value


# References are stored as ObjectId and handled as their hex string
ObjectIdStr = Annotated[str, BeforeValidator(_object_id_str), Field(pattern=r"^[0-9a-fA-F]{24}$")]


# ---------------------------------------------------------------------
# Embedded value objects
# ---------------------------------------------------------------------

class Item(BaseModel):
    quantity: Optional[str] = None
    expiryDate: Optional[str] = None
    description: Optional[str] = None
    totalItemPrice: Optional[str] = None

class HistoryEntry(BaseModel):
    statusHistory: Optional[str] = None
    dateUpdated: Optional[str] = None
    updatedBy: Optional[str] = None
    lastAssignedTo: Optional[str] = None
    reason: Optional[str] = None
    lastLocation: Optional[str] = None

class DispatcherEntry(BaseModel):
    dispatcherName: str = Field(..., min_length=1)
    vehicle: str = Field(..., min_length=1)
    assignedJob: Optional[str] = None
    mileage: Optional[float] = None  # morning odometer reading
    area: Optional[str] = None


# ---------------------------------------------------------------------
# Orders & warehouse stock
# ---------------------------------------------------------------------

class Order(BaseModel):
    # tracking
    product: Optional[str] = None
    doTrackingNumber: Optional[str] = None
    jobMethod: Optional[str] = None
    # sender
    senderName: Optional[str] = None
    senderAddress: Optional[str] = None
    senderPhoneNumber: Optional[str] = None
    senderEmail: Optional[str] = None
    # receiver
    receiverName: Optional[str] = None
    receiverAddress: Optional[str] = None
    receiverPostalCode: Optional[str] = None
    receiverPhoneNumber: Optional[str] = None
    additionalPhoneNumber: Optional[str] = None
    receiverEmail: Optional[str] = None
    area: Optional[str] = None
    patientNumber: Optional[str] = None
    icPassNum: Optional[str] = None
    appointmentPlace: Optional[str] = None
    # scheduling
    dateTimeSubmission: Optional[str] = None
    creationDate: Optional[str] = None
    pickupDate: Optional[str] = None
    jobDate: Optional[str] = None
    appointmentDate: Optional[str] = None
    # payment
    paymentMethod: Optional[str] = None
    paymentAmount: Optional[str] = None
    cargoPrice: Optional[str] = None
    totalPrice: Optional[str] = None
    membership: Optional[str] = None
    # shipment
    deliveryTypeCode: Optional[str] = None
    shipmentMethod: Optional[str] = None
    parcelWeight: Optional[str] = None
    parcelLength: Optional[str] = None
    parcelWidth: Optional[str] = None
    parcelHeight: Optional[str] = None
    itemCommodityType: Optional[str] = None
    itemContains: Optional[str] = None
    remarks: Optional[str] = None
    instructions: Optional[str] = None
    # workflow
    currentStatus: Optional[str] = None
    lastUpdateDateTime: Optional[str] = None
    assignedTo: Optional[str] = None
    latestReason: Optional[str] = None
    latestLocation: Optional[str] = None
    lastUpdatedBy: Optional[str] = None
    items: List[Item] = []
    history: List[HistoryEntry] = []

class Inventory(BaseModel):
    product: Optional[str] = None
    productName: Optional[str] = None
    remarks: Optional[str] = None
    dateTimeSubmission: Optional[str] = None
    cargoPrice: Optional[str] = None
    pickupDate: Optional[str] = None
    senderName: Optional[str] = None
    totalPrice: Optional[str] = None
    creationDate: Optional[str] = None
    instructions: Optional[str] = None
    itemContains: Optional[str] = None
    parcelWeight: Optional[str] = None
    supplierName: Optional[str] = None
    paymentAmount: Optional[str] = None
    shipmentMethod: Optional[str] = None
    permitApplication: Optional[str] = None
    itemCommodityType: Optional[str] = None
    currentStatus: Optional[str] = None
    lastUpdateDateTime: Optional[str] = None
    warehouseEntry: Optional[str] = None
    warehouseEntryDateTime: Optional[str] = None
    flightDate: Optional[str] = None
    mawbNo: Optional[str] = None
    latestReason: Optional[str] = None
    latestLocation: Optional[str] = None
    lastUpdatedBy: Optional[str] = None
    items: List[Item] = []
    history: List[HistoryEntry] = []

class OrderCounter(BaseModel):
    pharmacy: int = 0
    localdelivery: int = 0
    cbsl: int = 0

class WhatsAppOrder(BaseModel):
    icPictureFront: Optional[str] = None
    icPictureBack: Optional[str] = None
    dateTimeSubmission: Optional[str] = None
    receiverPhoneNumber: Optional[str] = None


# ---------------------------------------------------------------------
# Pre-rendered documents
# ---------------------------------------------------------------------

class PharmacyForm(BaseModel):
    formName: Optional[str] = None
    formDate: Optional[str] = None
    batchNo: Optional[str] = None
    startNo: Optional[str] = None
    endNo: Optional[str] = None
    htmlContent: Optional[str] = None
    creationDate: Optional[str] = None
    mohForm: Optional[str] = None
    numberOfForms: Optional[str] = None

class Pod(BaseModel):
    podName: Optional[str] = None
    product: Optional[str] = None
    podDate: Optional[str] = None
    podCreator: Optional[str] = None
    deliveryDate: Optional[str] = None
    area: Optional[str] = None
    dispatcher: Optional[str] = None
    htmlContent: Optional[str] = None

class Report(BaseModel):
    reportType: Optional[str] = None
    reportContent: Optional[str] = None  # saved HTML table
    datetimeUpdated: datetime = Field(default_factory=utcnow)
    createdBy: Optional[str] = None

class DispatchReport(BaseModel):
    reportType: str = Field(..., min_length=1)
    reportName: str = Field(..., min_length=1)
    reportContent: str = Field(..., min_length=1)
    datetimeUpdated: datetime = Field(default_factory=utcnow)
    createdBy: str = Field(..., min_length=1)
    assignedDispatchers: List[DispatcherEntry] = []


# ---------------------------------------------------------------------
# Users & fleet
# ---------------------------------------------------------------------

class User(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1, description="Stored as a passlib hash")
    role: Role = "admin"
    date: datetime = Field(default_factory=utcnow)

class Vehicle(BaseModel):
    plate: str = Field(..., min_length=1)
    status: str = Field(..., min_length=1, description="active, inactive")

class MileageLog(BaseModel):
    vehicleId: ObjectIdStr = Field(..., description="Reference to vehicle _id")
    date: datetime
    mileage: float
