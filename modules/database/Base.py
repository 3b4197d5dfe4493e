#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from sqlalchemy.orm import declarative_base

Base = declarative_base()
