from django.urls import path
from .views import ContractAmendmentViewSet

app_name = 'contracts'

amendment_list = ContractAmendmentViewSet.as_view({
    'get': 'list',
    'post': 'create'
})

urlpatterns = [
    path('<uuid:contract_pk>/amendments/', amendment_list, name='contract-amendments-list'),
]
