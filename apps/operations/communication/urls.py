from django.urls import path

from .views import admin_whatsapp, notice_broadcast, notice_delete, notice_list, student_whatsapp

urlpatterns = [
    path('', notice_list, name='notice_list'),
    path('<int:notice_id>/delete/', notice_delete, name='notice_delete'),
    path('<int:notice_id>/broadcast/', notice_broadcast, name='notice_broadcast'),
    path('whatsapp/student/', student_whatsapp, name='student_whatsapp'),
    path('whatsapp/admin/', admin_whatsapp, name='admin_whatsapp'),
]
