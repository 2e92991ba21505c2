"""
Migration Templates
===================

Numbered steps, executed in ascending order by the runner:
- _1_deploy_roles2library: deploy Roles2Library on top of Storage
- _2_init_roles2library: storage access and root user
- _3_deploy_useradapter: deploy the user contract bound to Roles2Library
- _4_setup_roles: public/role capabilities and user roles
"""
