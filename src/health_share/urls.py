from django.urls import path

from health_share import views

app_name = "health_share"

urlpatterns = [
    path("shared/validate/", views.validate_shared_token, name="validate"),
    path("shared/document-url/", views.shared_document_url, name="document_url"),
    path("documents/<str:signed>/", views.download_document, name="document"),
    path("tokens/", views.token_collection, name="tokens"),
    path("tokens/<uuid:token_id>/", views.delete_token, name="token_delete"),
    path("tokens/<uuid:token_id>/revoke/", views.revoke_token, name="token_revoke"),
    path("doctors/connect/", views.connect_to_doctor, name="doctor_connect"),
    path("doctors/patient-data/", views.patient_data_for_doctor, name="doctor_patient_data"),
    path("doctors/document-url/", views.doctor_document_url, name="doctor_document_url"),
]
