from django.urls import path
from .views import ContractAmendmentViewSet

app_name = 'amendments'

amendment_detail = ContractAmendmentViewSet.as_view({'get': 'retrieve'})
amendment_approve = ContractAmendmentViewSet.as_view({'post': 'approve'})
amendment_reject = ContractAmendmentViewSet.as_view({'post': 'reject'})
amendment_apply = ContractAmendmentViewSet.as_view({'post': 'apply'})

urlpatterns = [
    path('<uuid:pk>/', amendment_detail, name='amendment-detail'),
    path('<uuid:pk>/approve/', amendment_approve, name='amendment-approve'),
    path('<uuid:pk>/reject/', amendment_reject, name='amendment-reject'),
    path('<uuid:pk>/apply/', amendment_apply, name='amendment-apply'),
]
