"""
数据模型：上游记录镜像与控制台表单
"""
