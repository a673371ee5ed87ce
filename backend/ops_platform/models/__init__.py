from ops_platform.models.user import WorkspaceUser, UserRole
from ops_platform.models.workspace import Workspace, WorkspaceStatus
from ops_platform.models.contact import Contact
from ops_platform.models.booking_type import BookingType
from ops_platform.models.availability import AvailabilityWindow
from ops_platform.models.booking import Booking, BookingStatus
from ops_platform.models.conversation import (
    Conversation, ConversationStatus, Message, MessageChannel, MessageDirection
)
from ops_platform.models.form import ContactForm, FormTemplate, FormSubmission, FormStatus
from ops_platform.models.inventory import InventoryItem
from ops_platform.models.integration import Integration, IntegrationLog, IntegrationType
