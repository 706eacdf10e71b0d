from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.contrib.auth import views as auth_views
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),
    path('login/', auth_views.LoginView.as_view(), name='login'),
    path('logout/', auth_views.LogoutView.as_view(), name='logout'),

    path('', include('apps.core.users.urls')),
    path('', include('apps.academics.leads.urls')),
    path('settings/', include('apps.core.studio.urls')),
    path('students/', include('apps.academics.students.urls')),
    path('attendance/', include('apps.academics.attendance.urls')),
    path('payments/', include('apps.finance.payments.urls')),
    path('expenses/', include('apps.finance.expenses.urls')),
    path('notices/', include('apps.operations.communication.urls')),
    path('', include('apps.operations.scoring.urls')),
    path('', include('apps.operations.reports.urls')),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
